from fastapi import APIRouter, Depends, Query, Cookie, HTTPException, status, Response, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from urllib.parse import urlencode

from travelplan.core.cache import RedisCache
from travelplan.core.config import settings
from travelplan.core.database import get_db
from travelplan.core.redis_lifecycle import get_redis_client, get_cache
from travelplan.schemas.auth.password_reset import MessageResponse, ResendVerificationRequest
from travelplan.schemas.user.user import UserCreate, UserLogin, UserOut, TokenResponse, RefreshRequest
from travelplan.services.auth import auth as auth_service
from travelplan.utils.Oauth.googleauth import oauth, generate_nonce

router = APIRouter(prefix="/auth", tags=["Auth"])


def _cookie_kwargs() -> dict:
    return dict(
        domain=settings.COOKIE_DOMAIN,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def set_auth_cookies(response: Response, tokens: dict) -> None:
    response.set_cookie(
        key=settings.ACCESS_COOKIE_NAME,
        value=tokens["access_token"],
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        **_cookie_kwargs(),
    )
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=tokens["refresh_token"],
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600,
        **_cookie_kwargs(),
    )


def clear_auth_cookies(response: Response) -> None:
    for key in (settings.ACCESS_COOKIE_NAME, settings.REFRESH_COOKIE_NAME):
        response.delete_cookie(key=key, **_cookie_kwargs())


@router.post("/signup", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def signup(
    user: UserCreate,
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    return await auth_service.register_user(user, db, cache)


@router.get("/verify", response_model=MessageResponse)
async def verify_email(
    token: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    await auth_service.verify_email(token, db, cache)
    return MessageResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    payload: ResendVerificationRequest,
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    await auth_service.resend_verification(payload.email, db, cache)
    return MessageResponse(message="If this account needs verification, a new link has been sent.")


@router.post("/login", response_model=TokenResponse)
async def login_route(
    user_data: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
    redis_client = Depends(get_redis_client)
):
    tokens = await auth_service.login_user(user_data.email, user_data.password, db, redis_client)
    set_auth_cookies(response, tokens)
    return tokens


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token_route(
    response: Response,
    payload: Optional[RefreshRequest] = None,
    refresh_cookie: Optional[str] = Cookie(None, alias=settings.REFRESH_COOKIE_NAME),
    redis_client = Depends(get_redis_client)
):
    refresh_token = (payload.refresh_token if payload else None) or refresh_cookie
    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token missing"
        )

    tokens = await auth_service.refresh_access_token(refresh_token, redis_client)
    set_auth_cookies(response, tokens)
    return tokens


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    payload: Optional[RefreshRequest] = None,
    refresh_cookie: Optional[str] = Cookie(None, alias=settings.REFRESH_COOKIE_NAME),
    all_sessions: bool = False,
    redis_client = Depends(get_redis_client)
):
    refresh_token = (payload.refresh_token if payload else None) or refresh_cookie
    result = await auth_service.logout_user(refresh_token, redis_client, all_sessions)
    clear_auth_cookies(response)
    return result


if settings.google_enabled:

    @router.get("/google/login")
    async def google_login(request: Request, redis_client = Depends(get_redis_client)):
        nonce = generate_nonce()
        request.session["nonce"] = nonce
        await redis_client.set(f"google_nonce:{nonce}", "valid", ex=600)
        redirect_uri = request.url_for("google_callback")
        return await oauth.google.authorize_redirect(request, redirect_uri, nonce=nonce)

    @router.get("/google/callback")
    async def google_callback(
        request: Request,
        db: AsyncSession = Depends(get_db),
        redis_client = Depends(get_redis_client)
    ):
        user_data = await auth_service.handle_google_callback(request, db, redis_client)

        query = urlencode({"new_user": str(user_data["is_new_user"]).lower()})
        redirect_response = RedirectResponse(f"{settings.FRONTEND_BASE_URL.rstrip('/')}/login?{query}")
        set_auth_cookies(redirect_response, user_data)
        return redirect_response
