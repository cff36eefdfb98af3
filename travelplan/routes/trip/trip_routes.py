from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from travelplan.schemas.trip.trip_schema import TripCreate, TripUpdate, TripSummary, TripDetail
from travelplan.schemas.auth.password_reset import MessageResponse
from travelplan.models.user.user import User
from travelplan.core.database import get_db
from travelplan.dependencies.auth import get_current_user
from travelplan.services.trips.trip_service import TripService

router = APIRouter(prefix="/trips", tags=['Trips'])


@router.post("", response_model=TripDetail, status_code=status.HTTP_201_CREATED)
async def create_trip_route(
    trip: TripCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TripService.create_trip(db, trip, current_user.id)

@router.get("", response_model=List[TripSummary])
async def get_my_trips(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TripService.get_user_trips(session, current_user.id)

@router.get("/{trip_id}", response_model=TripDetail)
async def get_trip(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TripService.get_trip_by_id(session, current_user.id, trip_id)

@router.put("/{trip_id}", response_model=TripDetail)
async def update_trip_route(
    trip_id: int,
    trip_update: TripUpdate,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TripService.update_trip(session, trip_id, trip_update, current_user.id)

@router.delete("/{trip_id}", response_model=MessageResponse)
async def delete_trip_route(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TripService.delete_trip(session, trip_id, current_user.id)
