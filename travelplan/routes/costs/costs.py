from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from travelplan.core.database import get_db
from travelplan.dependencies.auth import get_current_user
from travelplan.dependencies.trip_access import require_trip_access
from travelplan.models.trips.trip_model import Trip
from travelplan.models.user.user import User
from travelplan.schemas.auth.password_reset import MessageResponse
from travelplan.schemas.costs.cost import CostCreate, CostUpdate, CostResponse, CostSummary
from travelplan.services.costs import cost_service

router = APIRouter(prefix="/trips/{trip_id}/costs", tags=["Costs"])


@router.get("", response_model=List[CostResponse])
async def list_costs(
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await cost_service.list_costs(session, trip.id)


# Declared before /{cost_id} so "summary" is not parsed as an id
@router.get("/summary", response_model=CostSummary)
async def cost_summary(
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await cost_service.get_cost_summary(session, trip.id)


@router.post("", response_model=CostResponse, status_code=status.HTTP_201_CREATED)
async def create_cost(
    data: CostCreate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await cost_service.create_cost(session, trip.id, data, current_user)


@router.get("/{cost_id}", response_model=CostResponse)
async def get_cost(
    cost_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await cost_service.get_cost(session, trip.id, cost_id)


@router.put("/{cost_id}", response_model=CostResponse)
async def update_cost(
    cost_id: int,
    data: CostUpdate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await cost_service.update_cost(session, trip.id, cost_id, data)


@router.delete("/{cost_id}", response_model=MessageResponse)
async def delete_cost(
    cost_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    await cost_service.delete_cost(session, trip.id, cost_id)
    return {"message": "Cost deleted"}
