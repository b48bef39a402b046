from __future__ import annotations

from fastapi import APIRouter, Depends

from quickdose.core.auth import CurrentUser, require_user
from quickdose.db.session import get_async_session
from quickdose.schemas.accounts import LocationUpdate, ProfileSchema, ProfileUpdate
from quickdose.services.profiles import clear_location, get_or_create_profile, set_location, update_profile

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileSchema)
async def read_profile(user: CurrentUser = Depends(require_user)) -> ProfileSchema:
    async with get_async_session() as session:
        profile = await get_or_create_profile(session, user_id=user.id, user_type=user.user_type)
        return ProfileSchema.model_validate(profile)


@router.patch("", response_model=ProfileSchema)
async def edit_profile(changes: ProfileUpdate, user: CurrentUser = Depends(require_user)) -> ProfileSchema:
    async with get_async_session() as session:
        profile = await get_or_create_profile(session, user_id=user.id, user_type=user.user_type)
        profile = await update_profile(session, profile, changes)
        return ProfileSchema.model_validate(profile)


@router.put("/location", response_model=ProfileSchema)
async def save_location(location: LocationUpdate, user: CurrentUser = Depends(require_user)) -> ProfileSchema:
    async with get_async_session() as session:
        profile = await get_or_create_profile(session, user_id=user.id, user_type=user.user_type)
        profile = await set_location(session, profile, location)
        return ProfileSchema.model_validate(profile)


@router.delete("/location", response_model=ProfileSchema)
async def remove_location(user: CurrentUser = Depends(require_user)) -> ProfileSchema:
    async with get_async_session() as session:
        profile = await get_or_create_profile(session, user_id=user.id, user_type=user.user_type)
        profile = await clear_location(session, profile)
        return ProfileSchema.model_validate(profile)


__all__ = ["router"]
