import secrets
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from travelplan.core.config import settings
from travelplan.core.cache import RedisCache
from travelplan.core.logger import logger
from travelplan.core.security import hash_password, revoke_all_refresh_tokens
from travelplan.models.user.user import User
from travelplan.services import email_service

# Redis key helpers

def _token_key(token: str) -> str:
    return f"reset_token:{token}"

RESET_TOKEN_TTL = settings.RESET_TOKEN_TTL_SECONDS

# Utils

def _generate_reset_token() -> str:
    return secrets.token_urlsafe(32)

async def _find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    q = await db.execute(select(User).where(User.email == email.lower()))
    return q.scalar_one_or_none()

async def request_password_reset(db: AsyncSession, cache: RedisCache, email: str) -> None:
    user = await _find_user_by_email(db, email)
    if not user or user.auth_type != "local":
        return

    token = _generate_reset_token()
    await cache.set(_token_key(token), user.id, expire=RESET_TOKEN_TTL)

    try:
        email_service.send_password_reset_email(user.email, token)
    except Exception as e:
        logger.error(f"Failed to send password reset email to {user.email}: {e}")

async def reset_password_with_token(db: AsyncSession, cache: RedisCache, redis_client, token: str, new_password: str) -> None:
    user_id = await cache.get(_token_key(token))
    if not user_id:
        raise HTTPException(status_code=400, detail="Token invalid or expired")

    user = await db.get(User, int(user_id))
    if not user:
        await cache.delete(_token_key(token))
        raise HTTPException(status_code=400, detail="Token invalid or expired")

    user.hashed_password = hash_password(new_password)
    await db.commit()

    await cache.delete(_token_key(token))
    await revoke_all_refresh_tokens(redis_client, user.id)
    logger.info(f"Password reset for user {user.id}; all sessions revoked")
