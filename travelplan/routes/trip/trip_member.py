from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from travelplan.dependencies.auth import get_current_user
from travelplan.dependencies.trip_access import require_trip_access
from travelplan.core.database import get_db
from travelplan.models.trips.trip_model import Trip
from travelplan.models.user.user import User
from travelplan.schemas.trip.trip_member import TripMemberOut, MemberRemovedResponse
from travelplan.services.trips.trip_member_service import get_trip_members, remove_member

router = APIRouter(prefix="/trips/{trip_id}/members", tags=["Trip Member"])

@router.get("", response_model=List[TripMemberOut])
async def list_trip_members(
    trip: Trip = Depends(require_trip_access),
    db: AsyncSession = Depends(get_db),
):
    return await get_trip_members(db, trip.id)

@router.delete("/{member_id}", response_model=MemberRemovedResponse)
async def delete_trip_member(
    member_id: int,
    trip: Trip = Depends(require_trip_access),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    removed = await remove_member(db, trip, member_id, current_user)
    return {"message": "Member removed successfully", "removed_member": removed}
