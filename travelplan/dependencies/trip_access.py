from fastapi import Depends, HTTPException, Path, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from travelplan.core.database import get_db
from travelplan.core.logger import logger
from travelplan.dependencies.auth import get_current_user
from travelplan.models.trips.trip_model import Trip
from travelplan.models.trips.trip_member import TripMember
from travelplan.models.user.user import User


async def get_accessible_trip(db: AsyncSession, trip_id: int, user_id: int) -> Trip:
    """Return the trip if the user created it or is a member, else 404."""
    trip = await db.scalar(
        select(Trip)
        .outerjoin(TripMember, TripMember.trip_id == Trip.id)
        .where(
            Trip.id == trip_id,
            or_(Trip.creator_id == user_id, TripMember.user_id == user_id),
        )
        .limit(1)
    )
    if not trip:
        logger.warning(f"Trip {trip_id} not found or not accessible for user {user_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return trip


async def get_owned_trip(db: AsyncSession, trip_id: int, user_id: int) -> Trip:
    """Return the trip only for its creator, else 404."""
    trip = await db.scalar(select(Trip).where(Trip.id == trip_id, Trip.creator_id == user_id))
    if not trip:
        logger.warning(f"Trip {trip_id} not found or not owned by user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found or you don't have permission",
        )
    return trip


async def require_trip_access(
    trip_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Trip:
    """Route dependency: the trip in the path, visible to the current user."""
    return await get_accessible_trip(db, trip_id, current_user.id)
