from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quickdose.db.models import Profile
from quickdose.schemas.accounts import LocationUpdate, ProfileUpdate

_LOCATION_FIELDS = ("latitude", "longitude", "address", "city", "state", "postal_code")


async def get_or_create_profile(session: AsyncSession, *, user_id: UUID, user_type: str) -> Profile:
    """Return the user's profile, creating an empty one on first access."""
    result = await session.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        profile = Profile(user_id=user_id, user_type=user_type)
        session.add(profile)
        await session.commit()
    return profile


async def update_profile(session: AsyncSession, profile: Profile, changes: ProfileUpdate) -> Profile:
    for field, value in changes.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    profile.updated_at = datetime.now(timezone.utc)
    await session.commit()
    return profile


async def set_location(session: AsyncSession, profile: Profile, location: LocationUpdate) -> Profile:
    for field, value in location.model_dump().items():
        setattr(profile, field, value)
    profile.updated_at = datetime.now(timezone.utc)
    await session.commit()
    return profile


async def clear_location(session: AsyncSession, profile: Profile) -> Profile:
    for field in _LOCATION_FIELDS:
        setattr(profile, field, None)
    profile.updated_at = datetime.now(timezone.utc)
    await session.commit()
    return profile


__all__ = ["clear_location", "get_or_create_profile", "set_location", "update_profile"]
