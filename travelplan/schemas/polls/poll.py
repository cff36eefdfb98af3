from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from travelplan.models.polls.poll_models import PollStatus
from travelplan.schemas.user.user import UserBrief
from travelplan.utils.dates import to_naive_utc, utcnow


def clean_options(options: List[str]) -> List[str]:
    cleaned = [option.strip() for option in options if option and option.strip()]
    if len(cleaned) < 2:
        raise ValueError("At least 2 options are required")
    return cleaned


def future_expiry(value: datetime) -> datetime:
    value = to_naive_utc(value)
    if value <= utcnow():
        raise ValueError("Expiration date must be in the future")
    return value


class PollCreate(BaseModel):
    question: str = Field(..., max_length=300)
    description: Optional[str] = None
    options: List[str]
    expires_at: datetime

    @field_validator("question")
    @classmethod
    def question_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Question is required")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v):
        return v.strip() or None if v is not None else None

    @field_validator("options")
    @classmethod
    def check_options(cls, v):
        return clean_options(v)

    @field_validator("expires_at")
    @classmethod
    def check_expiry(cls, v):
        return future_expiry(v)


class PollUpdate(BaseModel):
    question: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = None
    options: Optional[List[str]] = None
    expires_at: Optional[datetime] = None
    status: Optional[PollStatus] = None

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Question cannot be empty")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v):
        return v.strip() or None if v is not None else None

    @field_validator("options")
    @classmethod
    def check_options(cls, v):
        return clean_options(v) if v is not None else v

    @field_validator("expires_at")
    @classmethod
    def check_expiry(cls, v):
        return future_expiry(v) if v is not None else v


class VoteCreate(BaseModel):
    option: str = Field(..., min_length=1)


class VoteResponse(BaseModel):
    id: int
    poll_id: int
    user_id: int
    option: str
    user: UserBrief
    created_at: datetime

    class Config:
        from_attributes = True


class VoteResult(BaseModel):
    vote: VoteResponse
    message: str


class PollResponse(BaseModel):
    id: int
    trip_id: int
    question: str
    description: Optional[str] = None
    options: List[str]
    status: PollStatus
    expires_at: datetime
    created_by_id: int
    created_by: UserBrief
    votes: List[VoteResponse] = []
    vote_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
