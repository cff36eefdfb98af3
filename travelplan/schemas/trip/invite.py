from pydantic import BaseModel, EmailStr
from typing import Optional, Literal
from datetime import date, datetime
from travelplan.models.trips.trip_invite import InviteStatus
from travelplan.schemas.user.user import UserBrief


# When a member invites someone to the trip
class TripInviteCreate(BaseModel):
    email: EmailStr


# The receiver answering an invite
class InviteAction(BaseModel):
    action: Literal["accept", "decline"]


class InviteTripInfo(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    creator: Optional[UserBrief] = None

    model_config = {"from_attributes": True}


# What the trip's members see
class TripInviteResponse(BaseModel):
    id: int
    trip_id: int
    sender_id: int
    receiver_id: Optional[int] = None
    receiver_email: Optional[str] = None
    status: InviteStatus
    created_at: datetime
    sender: UserBrief
    receiver: Optional[UserBrief] = None

    class Config:
        from_attributes = True


# What the receiver sees in their inbox
class ReceivedInviteResponse(TripInviteResponse):
    trip: InviteTripInfo
