from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from travelplan.core.cache import RedisCache
from travelplan.core.database import get_db
from travelplan.core.redis_lifecycle import get_cache, get_redis_client
from travelplan.schemas.auth.password_reset import (
    ForgotPasswordRequest, ResetPasswordRequest, MessageResponse,
)
from travelplan.services.auth.password_reset_service import (
    request_password_reset, reset_password_with_token,
)

router = APIRouter(prefix="/auth", tags=["auth-password-reset"])


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(payload: ForgotPasswordRequest, db: AsyncSession = Depends(get_db), cache: RedisCache = Depends(get_cache)):
    await request_password_reset(db, cache, payload.email)
    return MessageResponse(message="If this email exists, a reset link has been sent.")

@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
    redis_client = Depends(get_redis_client),
):
    await reset_password_with_token(db, cache, redis_client, payload.reset_token, payload.new_password)
    return MessageResponse(message="Password reset successful. Please log in.")
