from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from travelplan.schemas.auth.password_reset import MessageResponse
from travelplan.schemas.trip.invite import TripInviteCreate, InviteAction, TripInviteResponse, ReceivedInviteResponse
from travelplan.services.trips.invite_service import (
    create_trip_invite, get_trip_invites, cancel_trip_invite,
    get_user_trip_invites, respond_to_invite, delete_invite,
)
from travelplan.dependencies.auth import get_current_user
from travelplan.dependencies.trip_access import require_trip_access
from travelplan.models.trips.trip_model import Trip
from travelplan.models.user.user import User
from travelplan.core.database import get_db

# Invites managed from inside a trip
trip_router = APIRouter(prefix="/trips/{trip_id}/invites", tags=["Trip Invites"])

# The current user's inbox
router = APIRouter(prefix="/invites", tags=["Trip Invites"])


@trip_router.post("", response_model=ReceivedInviteResponse, status_code=status.HTTP_201_CREATED)
async def send_trip_invite(
    invite_data: TripInviteCreate,
    trip: Trip = Depends(require_trip_access),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await create_trip_invite(db, trip, invite_data, current_user)

@trip_router.get("", response_model=List[TripInviteResponse])
async def list_trip_invites(
    trip: Trip = Depends(require_trip_access),
    db: AsyncSession = Depends(get_db),
):
    return await get_trip_invites(db, trip.id)

@trip_router.delete("/{invite_id}", response_model=MessageResponse)
async def cancel_invite(
    invite_id: int,
    trip: Trip = Depends(require_trip_access),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await cancel_trip_invite(db, trip, invite_id, current_user)
    return {"message": "Invitation cancelled"}


@router.get("", response_model=List[ReceivedInviteResponse])
async def view_user_invites(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await get_user_trip_invites(db, current_user)

@router.put("/{invite_id}", response_model=MessageResponse)
async def answer_invite(
    invite_id: int,
    payload: InviteAction,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    message = await respond_to_invite(db, invite_id, payload.action, current_user)
    return {"message": message}

@router.delete("/{invite_id}", response_model=MessageResponse)
async def remove_invite(
    invite_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await delete_invite(db, invite_id, current_user)
    return {"message": "Invitation deleted"}
