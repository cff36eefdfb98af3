from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from travelplan.models.tasks.task_model import TaskCategory, TaskStatus, TaskPriority
from travelplan.schemas.user.user import UserBrief
from travelplan.utils.text import require_text, strip_optional


class TaskCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = None
    category: TaskCategory = TaskCategory.general
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None
    assigned_to_id: Optional[int] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        return require_text(v, "Title")

    @field_validator("description")
    @classmethod
    def strip_description(cls, v):
        return strip_optional(v)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to_id: Optional[int] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return require_text(v, "Title")

    @field_validator("description")
    @classmethod
    def strip_description(cls, v):
        return strip_optional(v)


class TaskResponse(BaseModel):
    id: int
    trip_id: int
    title: str
    description: Optional[str] = None
    category: TaskCategory
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_by_id: int
    assigned_to_id: Optional[int] = None
    created_by: Optional[UserBrief] = None
    assigned_to: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
