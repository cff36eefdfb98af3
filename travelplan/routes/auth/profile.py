from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from travelplan.dependencies.auth import get_current_user
from travelplan.core.database import get_db
from travelplan.core.redis_lifecycle import get_redis_client
from travelplan.models.user.user import User
from travelplan.schemas.user.user import UserUpdate, UserOut, UserDataResponse, DataDeletionResponse
from travelplan.services.auth.profile_service import ProfileService

router = APIRouter(prefix="/me", tags=["Profile"])


@router.get("", response_model=UserOut)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProfileService.get_user_by_id(current_user.id, db)


@router.put("", response_model=UserOut)
async def update_my_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProfileService.update_user_profile(current_user.id, data, db)


@router.get("/data", response_model=UserDataResponse)
async def get_my_data(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProfileService.get_data_summary(current_user, db)


@router.delete("/data", response_model=DataDeletionResponse)
async def delete_my_data(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    redis_client = Depends(get_redis_client)
):
    return await ProfileService.delete_account(current_user, db, redis_client)
