from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime
from travelplan.schemas.user.user import UserBrief
from travelplan.schemas.trip.trip_member import TripMemberOut
from travelplan.utils.text import require_text


class TripBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        return require_text(v, "Trip name")

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be on or after the start date")
        return self


class TripCreate(TripBase):
    pass


class TripUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return require_text(v, "Trip name")


class TripResponse(TripBase):
    id: int
    creator_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripSummary(TripResponse):
    creator: UserBrief
    member_count: int


class TripDetail(TripResponse):
    creator: UserBrief
    members: List[TripMemberOut] = []
