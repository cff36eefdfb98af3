from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from fastapi import HTTPException, status
from sqlalchemy.orm import selectinload

from travelplan.core.logger import logger
from travelplan.models.trips.trip_member import TripMember, TripRole
from travelplan.models.trips.trip_model import Trip
from travelplan.models.user.user import User


async def is_user_already_member(db: AsyncSession, trip_id: int, user_id: int) -> bool:
    result = await db.execute(select(TripMember.id).where(
        TripMember.trip_id == trip_id,
        TripMember.user_id == user_id
    ))
    return result.scalar_one_or_none() is not None


async def add_member(db: AsyncSession, trip_id: int, user_id: int, role: TripRole = TripRole.MEMBER) -> TripMember:
    """Stage a membership row; the caller commits."""
    new_member = TripMember(trip_id=trip_id, user_id=user_id, role=role)
    db.add(new_member)
    return new_member


async def get_trip_members(db: AsyncSession, trip_id: int):
    result = await db.execute(
        select(TripMember)
        .where(TripMember.trip_id == trip_id)
        .options(selectinload(TripMember.user))
        .order_by(TripMember.joined_at, TripMember.id)
    )
    return result.scalars().all()


async def remove_member(db: AsyncSession, trip: Trip, member_id: int, current_user: User) -> User:
    """
    Remove a membership from the trip.

    The trip creator may remove anyone but themselves; any other member may
    only remove their own membership (leave the trip).
    """
    result = await db.execute(
        select(TripMember)
        .options(selectinload(TripMember.user))
        .where(TripMember.id == member_id, TripMember.trip_id == trip.id)
    )
    member = result.scalar_one_or_none()

    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")

    if member.user_id == trip.creator_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove the trip creator")

    if trip.creator_id != current_user.id and member.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to remove this member")

    removed_user = member.user
    await db.delete(member)
    await db.commit()

    logger.info(f"User {removed_user.id} removed from trip {trip.id} by user {current_user.id}")
    return removed_user
