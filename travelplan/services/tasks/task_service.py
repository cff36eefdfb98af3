from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from fastapi import HTTPException, status
from typing import List, Optional

from travelplan.core.logger import logger
from travelplan.services.trips.trip_member_service import is_user_already_member
from travelplan.models.tasks.task_model import Task, TaskCategory, TaskPriority, TaskStatus
from travelplan.models.user.user import User
from travelplan.schemas.tasks.task import TaskCreate, TaskUpdate
from travelplan.utils.dates import to_naive_utc


def _with_people(query):
    return query.options(selectinload(Task.created_by), selectinload(Task.assigned_to))


async def _fetch_task(session: AsyncSession, trip_id: int, task_id: int) -> Task:
    result = await session.execute(
        _with_people(select(Task))
        .where(Task.id == task_id, Task.trip_id == trip_id)
        .execution_options(populate_existing=True)
    )
    task = result.scalar_one_or_none()
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


async def _check_assignee(session: AsyncSession, trip_id: int, user_id: Optional[int]) -> None:
    if user_id is not None and not await is_user_already_member(session, trip_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Assigned user must be a member of the trip",
        )


async def list_tasks(
    session: AsyncSession,
    trip_id: int,
    status_filter: Optional[TaskStatus] = None,
    category: Optional[TaskCategory] = None,
    priority: Optional[TaskPriority] = None,
    assigned_to_id: Optional[int] = None,
) -> List[Task]:
    """Get all tasks for a trip with optional filters."""
    query = _with_people(select(Task)).where(Task.trip_id == trip_id)

    if status_filter:
        query = query.where(Task.status == status_filter)
    if category:
        query = query.where(Task.category == category)
    if priority:
        query = query.where(Task.priority == priority)
    if assigned_to_id is not None:
        query = query.where(Task.assigned_to_id == assigned_to_id)

    query = query.order_by(Task.created_at.desc(), Task.id.desc())
    result = await session.execute(query)
    return result.scalars().all()


async def create_task(session: AsyncSession, trip_id: int, data: TaskCreate, current_user: User) -> Task:
    await _check_assignee(session, trip_id, data.assigned_to_id)

    task = Task(
        trip_id=trip_id,
        created_by_id=current_user.id,
        title=data.title,
        description=data.description,
        category=data.category,
        priority=data.priority,
        status=TaskStatus.pending,
        due_date=to_naive_utc(data.due_date),
        assigned_to_id=data.assigned_to_id,
    )
    session.add(task)
    await session.commit()

    logger.info(f"Task {task.id} created on trip {trip_id} by user {current_user.id}")
    return await _fetch_task(session, trip_id, task.id)


async def get_task(session: AsyncSession, trip_id: int, task_id: int) -> Task:
    return await _fetch_task(session, trip_id, task_id)


async def update_task(session: AsyncSession, trip_id: int, task_id: int, data: TaskUpdate) -> Task:
    task = await _fetch_task(session, trip_id, task_id)
    update_fields = data.model_dump(exclude_unset=True)

    # assigned_to_id and due_date may be cleared; the enums and title may not
    for key in ("title", "category", "status", "priority"):
        if key in update_fields and update_fields[key] is None:
            update_fields.pop(key)

    if "assigned_to_id" in update_fields:
        await _check_assignee(session, trip_id, update_fields["assigned_to_id"])
    if "due_date" in update_fields:
        update_fields["due_date"] = to_naive_utc(update_fields["due_date"])

    for field, value in update_fields.items():
        setattr(task, field, value)

    await session.commit()
    return await _fetch_task(session, trip_id, task_id)


async def delete_task(session: AsyncSession, trip_id: int, task_id: int) -> None:
    task = await _fetch_task(session, trip_id, task_id)
    await session.delete(task)
    await session.commit()
    logger.info(f"Task {task_id} deleted from trip {trip_id}")
