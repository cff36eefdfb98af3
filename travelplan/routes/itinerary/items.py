from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from travelplan.core.database import get_db
from travelplan.dependencies.auth import get_current_user
from travelplan.dependencies.trip_access import require_trip_access
from travelplan.models.trips.trip_model import Trip
from travelplan.models.user.user import User
from travelplan.schemas.auth.password_reset import MessageResponse
from travelplan.schemas.itinerary.item import ItemCreate, ItemUpdate, ItemResponse, ItemCreateResponse
from travelplan.services.itinerary import item_service

router = APIRouter(prefix="/trips/{trip_id}/items", tags=["Itinerary"])


@router.get("", response_model=List[ItemResponse])
async def list_items(
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await item_service.list_items(session, trip.id)


@router.post("", response_model=ItemCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    data: ItemCreate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add an itinerary item; a priced item also books the cost."""
    item, cost = await item_service.create_item(session, trip.id, data, current_user)
    return {"item": item, "cost": cost}


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await item_service.get_item(session, trip.id, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: int,
    data: ItemUpdate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await item_service.update_item(session, trip.id, item_id, data)


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_item(
    item_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    await item_service.delete_item(session, trip.id, item_id)
    return {"message": "Itinerary item deleted"}
