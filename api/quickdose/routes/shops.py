from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from quickdose.core.auth import CurrentUser, require_seller
from quickdose.core.config import get_settings
from quickdose.db.session import get_async_session
from quickdose.schemas.shops import ShopListResponse, ShopRegistration, ShopSchema
from quickdose.services.shops import (
    ShopNotFoundError,
    fetch_shops_nearby,
    get_owner_shop,
    get_shop,
    register_shop,
    shop_to_schema,
)

router = APIRouter(prefix="/shops", tags=["shops"])
settings = get_settings()


def resolve_radius(radius_km: float | None) -> float:
    """Apply the default search radius and reject out-of-range values."""
    radius = radius_km if radius_km is not None else settings.default_radius_km
    if radius <= 0:
        raise HTTPException(status_code=400, detail="radius_km must be positive")
    if radius > settings.max_radius_km:
        raise HTTPException(status_code=400, detail=f"Search radius cannot exceed {settings.max_radius_km:g}km")
    return radius


@router.get("/nearby", response_model=ShopListResponse)
async def shops_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius_km: float | None = Query(None),
) -> ShopListResponse:
    radius = resolve_radius(radius_km)
    async with get_async_session() as session:
        return await fetch_shops_nearby(session, lat=lat, lon=lon, radius_km=radius)


@router.post("", response_model=ShopSchema, status_code=status.HTTP_201_CREATED)
async def create_shop(registration: ShopRegistration, user: CurrentUser = Depends(require_seller)) -> ShopSchema:
    async with get_async_session() as session:
        shop = await register_shop(session, owner_id=user.id, registration=registration)
        return shop_to_schema(shop)


@router.get("/mine", response_model=ShopSchema)
async def my_shop(user: CurrentUser = Depends(require_seller)) -> ShopSchema:
    async with get_async_session() as session:
        try:
            shop = await get_owner_shop(session, user.id)
        except ShopNotFoundError:
            raise HTTPException(status_code=404, detail="Register your shop first")
        return shop_to_schema(shop)


@router.get("/{shop_id}", response_model=ShopSchema)
async def shop_detail(shop_id: UUID) -> ShopSchema:
    async with get_async_session() as session:
        try:
            shop = await get_shop(session, shop_id)
        except ShopNotFoundError:
            raise HTTPException(status_code=404, detail="Shop not found")
        return shop_to_schema(shop)


__all__ = ["router", "resolve_radius"]
