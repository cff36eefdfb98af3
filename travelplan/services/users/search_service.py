from typing import List, Optional

from sqlalchemy import select, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from travelplan.dependencies.trip_access import get_accessible_trip
from travelplan.models.trips.trip_invite import TripInvite, InviteStatus
from travelplan.models.trips.trip_member import TripMember
from travelplan.models.user.user import User

SEARCH_LIMIT = 10
MIN_QUERY_LENGTH = 2


async def search_users(db: AsyncSession, query: str, current_user: User, trip_id: Optional[int] = None) -> List[User]:
    """
    Find people to invite by name or email fragment.

    With a trip id the caller must be able to see that trip; users who
    already belong to it or have a pending invite to it are left out.
    """
    if trip_id is not None:
        await get_accessible_trip(db, trip_id, current_user.id)

    term = (query or "").strip().lower()
    if len(term) < MIN_QUERY_LENGTH:
        return []

    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    stmt = select(User).where(
        or_(
            func.lower(User.name).like(pattern, escape="\\"),
            func.lower(User.email).like(pattern, escape="\\"),
        ),
        User.id != current_user.id,
    )

    if trip_id is not None:
        members = select(TripMember.user_id).where(TripMember.trip_id == trip_id)
        pending = (TripInvite.trip_id == trip_id, TripInvite.status == InviteStatus.pending)
        invited_ids = select(TripInvite.receiver_id).where(*pending, TripInvite.receiver_id.is_not(None))
        invited_emails = select(TripInvite.receiver_email).where(*pending, TripInvite.receiver_email.is_not(None))
        stmt = stmt.where(
            User.id.not_in(members),
            User.id.not_in(invited_ids),
            User.email.not_in(invited_emails),
        )

    result = await db.execute(stmt.order_by(User.name).limit(SEARCH_LIMIT))
    return result.scalars().all()
