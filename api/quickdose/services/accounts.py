from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quickdose.core.auth import consume_otp, generate_otp, hash_password, store_otp, verify_password
from quickdose.core.config import get_settings
from quickdose.db.models import MedicalShop, Profile, User
from quickdose.schemas.accounts import RegisterRequest
from quickdose.schemas.shops import default_operating_hours, default_services

logger = logging.getLogger(__name__)


class DuplicateEmailError(Exception):
    pass


class InvalidCredentialsError(Exception):
    pass


class UserTypeMismatchError(Exception):
    def __init__(self, actual: str, expected: str) -> None:
        super().__init__(f"This account is registered as a {actual}, not a {expected}")
        self.actual = actual
        self.expected = expected


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def register_user(session: AsyncSession, request: RegisterRequest) -> User:
    """Create a user with its profile, and a shop for sellers.

    Seller shops start without coordinates; they are excluded from nearby
    searches until the seller registers a location.
    """
    if await get_user_by_email(session, request.email) is not None:
        raise DuplicateEmailError(request.email)

    user = User(
        email=request.email,
        password_hash=hash_password(request.password),
        user_type=request.user_type,
    )
    session.add(user)
    await session.flush()

    session.add(Profile(
        user_id=user.id,
        user_type=request.user_type,
        display_name=request.name,
        phone=request.phone,
        address=request.address,
    ))

    if request.user_type == "seller":
        session.add(MedicalShop(
            owner_id=user.id,
            shop_name=request.store_name,
            license_number=request.license_number,
            owner_name=request.name,
            phone=request.phone,
            email=request.email,
            address=request.address or "",
            latitude=None,
            longitude=None,
            operating_hours={day: hours.model_dump() for day, hours in default_operating_hours().items()},
            services=default_services(),
        ))

    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateEmailError(request.email) from exc

    logger.info("Registered %s account %s", user.user_type, user.id)
    return user


async def authenticate(session: AsyncSession, *, email: str, password: str, user_type: str) -> User:
    user = await get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError(email)
    if user.user_type != user_type:
        raise UserTypeMismatchError(actual=user.user_type, expected=user_type)
    return user


def deliver_otp(email: str, code: str) -> None:
    """Hand the code to the delivery channel.

    SMS/e-mail delivery is an external integration; outside production the
    code is logged so local logins work.
    """
    if get_settings().environment != "production":
        logger.info("OTP for %s: %s", email, code)
    else:
        logger.info("OTP issued for %s", email)


async def request_otp(session: AsyncSession, email: str) -> bool:
    """Issue a login code. Returns False for unknown e-mails."""
    user = await get_user_by_email(session, email)
    if user is None:
        logger.debug("OTP requested for unknown email")
        return False

    code = generate_otp()
    await store_otp(user.email, code)
    deliver_otp(user.email, code)
    return True


async def verify_otp(session: AsyncSession, *, email: str, code: str) -> User:
    if not await consume_otp(email, code):
        raise InvalidCredentialsError(email)
    user = await get_user_by_email(session, email)
    if user is None:
        raise InvalidCredentialsError(email)
    return user


__all__ = [
    "DuplicateEmailError",
    "InvalidCredentialsError",
    "UserTypeMismatchError",
    "authenticate",
    "deliver_otp",
    "get_user_by_email",
    "register_user",
    "request_otp",
    "verify_otp",
]
