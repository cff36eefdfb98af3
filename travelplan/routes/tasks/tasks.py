from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from travelplan.core.database import get_db
from travelplan.dependencies.auth import get_current_user
from travelplan.dependencies.trip_access import require_trip_access
from travelplan.models.tasks.task_model import TaskCategory, TaskPriority, TaskStatus
from travelplan.models.trips.trip_model import Trip
from travelplan.models.user.user import User
from travelplan.schemas.auth.password_reset import MessageResponse
from travelplan.schemas.tasks.task import TaskCreate, TaskUpdate, TaskResponse
from travelplan.services.tasks import task_service

router = APIRouter(prefix="/trips/{trip_id}/tasks", tags=["Tasks"])


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    category: Optional[TaskCategory] = Query(None),
    priority: Optional[TaskPriority] = Query(None),
    assigned_to_id: Optional[int] = Query(None),
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    """Tasks for a trip, newest first, optionally filtered."""
    return await task_service.list_tasks(session, trip.id, status_filter, category, priority, assigned_to_id)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await task_service.create_task(session, trip.id, data, current_user)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await task_service.get_task(session, trip.id, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await task_service.update_task(session, trip.id, task_id, data)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    await task_service.delete_task(session, trip.id, task_id)
    return {"message": "Task deleted"}
