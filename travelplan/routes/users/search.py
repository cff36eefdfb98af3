from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from travelplan.core.database import get_db
from travelplan.dependencies.auth import get_current_user
from travelplan.models.user.user import User
from travelplan.schemas.user.user import UserSearchResponse
from travelplan.services.users.search_service import search_users

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/search", response_model=UserSearchResponse)
async def search(
    q: str = Query(""),
    trip_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    users = await search_users(db, q, current_user, trip_id)
    return {"users": users}
