from pydantic import BaseModel
from datetime import datetime
from travelplan.models.trips.trip_member import TripRole
from travelplan.schemas.user.user import UserBrief


class TripMemberOut(BaseModel):
    id: int
    trip_id: int
    user_id: int
    user: UserBrief
    role: TripRole
    joined_at: datetime

    model_config = {
        "from_attributes": True
    }


class MemberRemovedResponse(BaseModel):
    message: str
    removed_member: UserBrief
