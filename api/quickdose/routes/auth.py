"""Authentication routes."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quickdose.core.auth import CurrentUser, create_access_token, require_user, revoke_token
from quickdose.db.session import get_async_session
from quickdose.middleware import AUTH_RATE_LIMIT, limiter
from quickdose.schemas.accounts import (
    LoginRequest,
    MeResponse,
    OtpRequest,
    OtpVerifyRequest,
    RegisterRequest,
    TokenResponse,
)
from quickdose.services.accounts import (
    DuplicateEmailError,
    InvalidCredentialsError,
    UserTypeMismatchError,
    authenticate,
    register_user,
    request_otp,
    verify_otp,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(request: Request, payload: RegisterRequest) -> TokenResponse:
    """
    Create a buyer or seller account and return a token for it.

    Sellers get a shop record without a location; it shows up in nearby
    searches once the seller registers the shop's coordinates.

    Raises:
        HTTPException: If the e-mail is already registered (409)
    """
    async with get_async_session() as session:
        try:
            user = await register_user(session, payload)
        except DuplicateEmailError:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    token = create_access_token(user.id, user.email, user.user_type)
    return TokenResponse(access_token=token, user_type=user.user_type)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(request: Request, payload: LoginRequest) -> TokenResponse:
    """
    Authenticate with e-mail and password to receive a JWT token.

    Raises:
        HTTPException: If credentials are invalid (401) or the account is
            of the other user type (403)
    """
    async with get_async_session() as session:
        try:
            user = await authenticate(
                session,
                email=payload.email,
                password=payload.password,
                user_type=payload.user_type,
            )
        except InvalidCredentialsError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
        except UserTypeMismatchError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    token = create_access_token(user.id, user.email, user.user_type)
    return TokenResponse(access_token=token, user_type=user.user_type)


@router.post("/otp/request")
@limiter.limit(AUTH_RATE_LIMIT)
async def otp_request(request: Request, payload: OtpRequest) -> dict[str, str]:
    """Send a one-time login code. The answer does not reveal whether the account exists."""
    async with get_async_session() as session:
        await request_otp(session, payload.email)
    return {"message": "If the account exists, a code has been sent"}


@router.post("/otp/verify", response_model=TokenResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def otp_verify(request: Request, payload: OtpVerifyRequest) -> TokenResponse:
    async with get_async_session() as session:
        try:
            user = await verify_otp(session, email=payload.email, code=payload.code)
        except InvalidCredentialsError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired code")
    token = create_access_token(user.id, user.email, user.user_type)
    return TokenResponse(access_token=token, user_type=user.user_type)


@router.post("/logout")
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict[str, str]:
    """
    Logout by revoking the current JWT token.

    The token stays on a Redis-backed blacklist until it expires.

    Raises:
        HTTPException: If token is missing (401)
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token"
        )

    await revoke_token(credentials.credentials)

    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser = Depends(require_user)) -> MeResponse:
    return MeResponse(id=user.id, email=user.email, user_type=user.user_type)


__all__ = ["router"]
