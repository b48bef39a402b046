from __future__ import annotations

import datetime as dt
import hashlib
import hmac
import logging
import secrets
import uuid
from dataclasses import dataclass
from typing import Optional

import bcrypt
import jwt
import redis.asyncio as redis
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quickdose.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
security = HTTPBearer(auto_error=False)

USER_TYPES = ("buyer", "seller")


@dataclass(frozen=True)
class CurrentUser:
    id: uuid.UUID
    email: str
    user_type: str

    @property
    def is_seller(self) -> bool:
        return self.user_type == "seller"


# Redis client for token blacklist and OTP codes
async def get_redis_client() -> redis.Redis:
    """Get Redis client for token revocation and OTP storage."""
    return redis.from_url(str(settings.redis_url), decode_responses=True)


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password as string
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hashed password.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to check against

    Returns:
        True if password matches, False otherwise
    """
    password_bytes = plain_password.encode('utf-8')
    hashed_bytes = hashed_password.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def create_access_token(user_id: uuid.UUID, email: str, user_type: str) -> str:
    """
    Create a signed JWT for an authenticated user.

    Args:
        user_id: Primary key of the user (stored as ``sub``)
        email: Account e-mail
        user_type: ``buyer`` or ``seller``

    Returns:
        JWT token string
    """
    payload = {
        "sub": str(user_id),
        "email": email,
        "user_type": user_type,
        "exp": dt.datetime.now(dt.timezone.utc) + dt.timedelta(hours=settings.access_token_ttl_hours),
    }
    return jwt.encode(payload, settings.secret_key, algorithm="HS256")


def generate_otp(length: Optional[int] = None) -> str:
    """Return a random numeric one-time passcode."""
    length = length or settings.otp_length
    return "".join(secrets.choice("0123456789") for _ in range(length))


async def store_otp(email: str, code: str) -> None:
    """
    Store the hash of an OTP for ``email`` with the configured TTL.

    Only the digest is kept; a new request replaces any pending code.
    """
    redis_client = await get_redis_client()
    try:
        await redis_client.setex(f"otp:{_digest(email.lower())}", settings.otp_ttl_seconds, _digest(code))
    finally:
        await redis_client.close()


async def consume_otp(email: str, code: str) -> bool:
    """
    Check ``code`` against the pending OTP for ``email``.

    The pending code is taken with a single GETDEL, so concurrent attempts
    cannot both match it and any attempt, right or wrong, uses it up.

    Returns:
        True if the code matched.
    """
    key = f"otp:{_digest(email.lower())}"
    redis_client = await get_redis_client()
    try:
        stored = await redis_client.getdel(key)
        return bool(stored) and hmac.compare_digest(stored, _digest(code))
    finally:
        await redis_client.close()


async def revoke_token(token: str) -> None:
    """
    Revoke a JWT token by adding it to the Redis blacklist.

    Args:
        token: JWT token string to revoke

    The token is hashed before storing for efficiency and privacy.
    Expiry matches the token's exp claim so blacklist auto-cleans.
    """
    redis_client = None
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=["HS256"])
        exp = payload.get("exp")

        if not exp:
            return

        ttl = int(exp - dt.datetime.now(dt.timezone.utc).timestamp())
        if ttl <= 0:
            return  # Token already expired

        redis_client = await get_redis_client()
        await redis_client.setex(f"revoked_token:{_digest(token)}", ttl, "1")
    except Exception:
        # Logout must not fail because the blacklist is unavailable.
        logger.warning("Token revocation failed", exc_info=True)
    finally:
        if redis_client is not None:
            try:
                await redis_client.close()
            except Exception:
                logger.debug("Closing Redis client failed", exc_info=True)


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Args:
        token: JWT token string to check

    Returns:
        True if token is revoked, False otherwise
    """
    redis_client = None
    try:
        redis_client = await get_redis_client()
        revoked = await redis_client.exists(f"revoked_token:{_digest(token)}")
        return bool(revoked)
    except Exception:
        # If revocation check fails, deny access (fail closed).
        logger.warning("Token revocation check failed", exc_info=True)
        return True
    finally:
        if redis_client is not None:
            try:
                await redis_client.close()
            except Exception:
                logger.debug("Closing Redis client failed", exc_info=True)


async def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """
    Verify the bearer token and return the calling user.

    Raises:
        HTTPException: If token is missing, invalid or revoked
    """
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    token = credentials.credentials

    if await is_token_revoked(token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has been revoked")

    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=["HS256"])
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    user_type = payload.get("user_type")
    if user_type not in USER_TYPES:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    return CurrentUser(id=user_id, email=payload.get("email", ""), user_type=user_type)


async def require_seller(user: CurrentUser = Depends(require_user)) -> CurrentUser:
    """Require a seller account."""
    if not user.is_seller:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Seller account required")
    return user


__all__ = [
    "CurrentUser",
    "USER_TYPES",
    "consume_otp",
    "create_access_token",
    "generate_otp",
    "hash_password",
    "is_token_revoked",
    "require_seller",
    "require_user",
    "revoke_token",
    "store_otp",
    "verify_password",
]
