import secrets
from typing import Optional

from fastapi import HTTPException, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import IntegrityError

from travelplan.core.cache import RedisCache
from travelplan.core.config import settings
from travelplan.core.logger import logger
from travelplan.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
    is_refresh_token_valid,
    revoke_refresh_token,
    revoke_all_refresh_tokens,
)
from travelplan.models.user.user import User
from travelplan.schemas.user.user import UserCreate
from travelplan.services import email_service
from travelplan.utils.dates import utcnow
from travelplan.utils.Oauth.googleauth import oauth


def _verify_key(token: str) -> str:
    return RedisCache.build_key("verify_token", token)


async def _issue_verification(cache: RedisCache, user: User) -> None:
    token = secrets.token_urlsafe(32)
    await cache.set(_verify_key(token), user.id, expire=settings.VERIFICATION_TOKEN_TTL_SECONDS)
    try:
        email_service.send_verification_email(user.email, token)
    except Exception as e:
        logger.error(f"Failed to send verification email to {user.email}: {e}")


async def register_user(user_data: UserCreate, db: AsyncSession, cache: RedisCache) -> User:
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar():
        raise HTTPException(status_code=400, detail="User with this email already exists")

    new_user = User(
        name=user_data.name,
        email=email,
        hashed_password=hash_password(user_data.password),
        auth_type="local",
    )

    db.add(new_user)
    try:
        await db.commit()
        await db.refresh(new_user)
    except IntegrityError:
        # Two signups racing on the same email
        await db.rollback()
        raise HTTPException(status_code=400, detail="User with this email already exists")

    logger.info(f"User {new_user.id} registered")
    await _issue_verification(cache, new_user)
    return new_user


async def verify_email(token: str, db: AsyncSession, cache: RedisCache) -> User:
    user_id = await cache.get(_verify_key(token))
    if not user_id:
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

    user = await db.get(User, int(user_id))
    if not user:
        await cache.delete(_verify_key(token))
        raise HTTPException(status_code=404, detail="User not found")

    if not user.email_verified_at:
        user.email_verified_at = utcnow()
        await db.commit()
        await db.refresh(user)

    await cache.delete(_verify_key(token))
    logger.info(f"User {user.id} verified their email")
    return user


async def resend_verification(email: str, db: AsyncSession, cache: RedisCache) -> None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()
    # Silent for unknown, verified or OAuth accounts so addresses can't be enumerated
    if not user or user.auth_type != "local" or user.email_verified_at:
        return
    await _issue_verification(cache, user)


async def _issue_tokens(user: User, redis_client) -> dict:
    access_token = create_access_token(data={"sub": str(user.id)})
    refresh_token = await create_refresh_token(user.id, redis_client)
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
    }


async def login_user(email: str, password: str, db: AsyncSession, redis_client) -> dict:
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar()

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if user.auth_type != "local" or not user.hashed_password:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User registered with different auth method"
        )

    if not verify_password(password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if settings.REQUIRE_EMAIL_VERIFICATION and not user.is_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Please verify your email before signing in"
        )

    logger.info(f"User {user.id} logged in")
    return await _issue_tokens(user, redis_client)


async def refresh_access_token(refresh_token: str, redis_client) -> dict:
    try:
        payload = decode_token(refresh_token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )

    user_id = payload.get("sub")
    jti = payload.get("jti")
    if payload.get("type") != "refresh" or not user_id or not jti:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token payload"
        )

    if not await is_refresh_token_valid(redis_client, user_id, jti):
        raise HTTPException(status_code=401, detail="Refresh token revoked")

    return {
        "access_token": create_access_token({"sub": user_id}),
        "refresh_token": refresh_token,
        "token_type": "bearer"
    }


async def logout_user(refresh_token: Optional[str], redis_client, all_sessions: bool = False) -> dict:
    if not refresh_token:
        return {"message": "Logout successful"}

    try:
        payload = decode_token(refresh_token)
    except JWTError:
        return {"message": "Logout successful"}

    user_id = payload.get("sub")
    jti = payload.get("jti")
    if user_id:
        if all_sessions:
            await revoke_all_refresh_tokens(redis_client, user_id)
        elif jti:
            await revoke_refresh_token(redis_client, user_id, jti)

    return {"message": "Logout successful"}


async def handle_google_callback(request, db: AsyncSession, redis_client) -> dict:
    token = await oauth.google.authorize_access_token(request)
    if not token:
        raise HTTPException(status_code=400, detail="Failed to retrieve access token from Google")

    nonce = request.session.get("nonce")
    claims = await oauth.google.parse_id_token(token, nonce=nonce)
    received_nonce = claims.get("nonce")
    if not received_nonce:
        raise HTTPException(status_code=400, detail="Nonce missing from token")

    stored_nonce = await redis_client.get(f"google_nonce:{received_nonce}")
    if not stored_nonce:
        raise HTTPException(status_code=400, detail="Invalid or expired nonce")
    await redis_client.delete(f"google_nonce:{received_nonce}")

    email = claims.get("email")
    if not email:
        raise HTTPException(status_code=400, detail="Email not found in Google user info")
    email = email.lower()

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    is_new_user = False

    if not user:
        user = User(
            email=email,
            name=claims.get("name") or email.split("@")[0],
            hashed_password=None,
            auth_type="google",
            email_verified_at=utcnow(),
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        is_new_user = True
        logger.info(f"Google user {user.id} created")
    elif user.auth_type != "google":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="User registered with different auth method")

    tokens = await _issue_tokens(user, redis_client)
    return {**tokens, "user": user, "is_new_user": is_new_user}
