from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from travelplan.core.config import settings


def _check_password(value: str) -> str:
    if len(value) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")
    return value


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("password")
    @classmethod
    def strong_enough(cls, v: str) -> str:
        return _check_password(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserBrief(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class UserOut(BaseModel):
    id: int
    name: str
    email: EmailStr
    auth_type: str
    email_verified_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def strong_enough(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_password(v)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


# Account data export / deletion

class DataSummary(BaseModel):
    trips: int
    costs: int
    tasks: int
    assigned_tasks: int
    polls: int
    votes: int
    sent_invites: int
    received_invites: int


class OwnedTripSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime
    member_count: int
    cost_count: int
    task_count: int
    poll_count: int


class UserDataResponse(BaseModel):
    user: UserOut
    data_summary: DataSummary
    trips: List[OwnedTripSummary]


class DeletedData(BaseModel):
    trips: int
    costs: int
    tasks: int
    polls: int
    invitations: int


class DataDeletionResponse(BaseModel):
    message: str
    deleted_data: DeletedData


class UserSearchResponse(BaseModel):
    users: List[UserBrief]
