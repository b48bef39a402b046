from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quickdose.core.config import get_settings
from quickdose.db.models import MedicalShop
from quickdose.schemas.shops import DAYS, ShopListResponse, ShopRegistration, ShopSchema
from quickdose.services.cache import cached_json, invalidate
from quickdose.services.geospatial import GeoPoint, has_location, rank_nearby, record_from_mapping

logger = logging.getLogger(__name__)
settings = get_settings()

SHOP_CACHE_KEY = "medical_shops:all"


class ShopNotFoundError(Exception):
    pass


def hours_today(operating_hours: Optional[Mapping[str, Any]], today: Optional[date] = None) -> str:
    """Opening hours text for the current weekday."""
    if not operating_hours:
        return "Hours not specified"
    today = today or date.today()
    day_hours = operating_hours.get(DAYS[today.weekday()])
    if not day_hours:
        return "Hours not specified"
    if day_hours.get("closed"):
        return "Closed today"
    return f"{day_hours['open']} - {day_hours['close']}"


def directions_url(latitude: Optional[float], longitude: Optional[float]) -> Optional[str]:
    if not has_location(latitude, longitude):
        return None
    return f"https://www.google.com/maps/dir/?api=1&destination={latitude},{longitude}"


def shop_to_schema(shop: MedicalShop, *, distance_km: Optional[float] = None, today: Optional[date] = None) -> ShopSchema:
    return ShopSchema(
        id=shop.id,
        shop_name=shop.shop_name,
        owner_name=shop.owner_name,
        license_number=shop.license_number,
        phone=shop.phone,
        email=shop.email,
        address=shop.address,
        city=shop.city,
        state=shop.state,
        postal_code=shop.postal_code,
        latitude=shop.latitude,
        longitude=shop.longitude,
        operating_hours=shop.operating_hours,
        services=shop.services,
        created_at=shop.created_at,
        distance_km=distance_km,
        hours_today=hours_today(shop.operating_hours, today),
        directions_url=directions_url(shop.latitude, shop.longitude),
    )


async def get_shop(session: AsyncSession, shop_id: UUID) -> MedicalShop:
    shop = await session.get(MedicalShop, shop_id)
    if shop is None:
        raise ShopNotFoundError(str(shop_id))
    return shop


async def get_owner_shop(session: AsyncSession, owner_id: UUID) -> MedicalShop:
    result = await session.execute(select(MedicalShop).where(MedicalShop.owner_id == owner_id))
    shop = result.scalar_one_or_none()
    if shop is None:
        raise ShopNotFoundError(str(owner_id))
    return shop


async def register_shop(session: AsyncSession, *, owner_id: UUID, registration: ShopRegistration) -> MedicalShop:
    """Create the seller's shop, or update it if one already exists."""
    result = await session.execute(select(MedicalShop).where(MedicalShop.owner_id == owner_id))
    shop = result.scalar_one_or_none()
    if shop is None:
        shop = MedicalShop(owner_id=owner_id)
        session.add(shop)

    for field, value in registration.model_dump().items():
        setattr(shop, field, value)

    await session.commit()
    await invalidate(SHOP_CACHE_KEY)
    logger.info("Registered shop %s for owner %s", shop.id, owner_id)
    return shop


async def _load_shop_rows(session: AsyncSession) -> list[dict[str, Any]]:
    async def producer() -> list[dict[str, Any]]:
        result = await session.execute(select(MedicalShop).order_by(MedicalShop.created_at))
        return [shop_to_schema(shop).model_dump(mode="json") for shop in result.scalars().all()]

    return await cached_json(SHOP_CACHE_KEY, settings.shop_cache_ttl_seconds, producer)


async def fetch_shops_nearby(
    session: AsyncSession,
    *,
    lat: float,
    lon: float,
    radius_km: float,
    today: Optional[date] = None,
) -> ShopListResponse:
    rows = await _load_shop_rows(session)
    ranked = rank_nearby(GeoPoint(lat, lon), (record_from_mapping(row) for row in rows), radius_km)

    items = []
    for entry in ranked:
        row = dict(entry.payload)
        row["distance_km"] = round(entry.distance_km, 2)
        row["hours_today"] = hours_today(row.get("operating_hours"), today)
        items.append(ShopSchema(**row))

    if not items:
        logger.debug("No shops within %.1f km of (%.4f, %.4f)", radius_km, lat, lon)
    return ShopListResponse(items=items, radius_km=radius_km)


__all__ = [
    "SHOP_CACHE_KEY",
    "ShopNotFoundError",
    "directions_url",
    "fetch_shops_nearby",
    "get_owner_shop",
    "get_shop",
    "hours_today",
    "register_shop",
    "shop_to_schema",
]
