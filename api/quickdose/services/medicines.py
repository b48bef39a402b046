from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from quickdose.db.models import InventoryItem, MedicalShop
from quickdose.schemas.shops import MedicineListResponse, MedicineSchema
from quickdose.services.cart import CartItemInput
from quickdose.services.geospatial import (
    DEFAULT_RADIUS_KM,
    GeoPoint,
    LocationRecord,
    distance_km,
    format_distance,
    has_location,
    rank_nearby,
)
from quickdose.services.inventory import InventoryItemNotFoundError, stock_status


class OutOfStockError(Exception):
    pass


def _to_schema(item: InventoryItem, shop: MedicalShop, distance: Optional[float] = None) -> MedicineSchema:
    return MedicineSchema(
        id=item.id,
        name=item.name,
        description=item.description,
        price=item.price,
        category=item.category,
        in_stock=item.stock > 0,
        stock_status=stock_status(item.stock),
        shop_id=shop.id,
        pharmacy=shop.shop_name,
        distance_km=round(distance, 2) if distance is not None else None,
        distance_label=format_distance(distance) if distance is not None else "",
    )


async def search_medicines(
    session: AsyncSession,
    *,
    q: Optional[str] = None,
    origin: Optional[GeoPoint] = None,
    radius_km: float = DEFAULT_RADIUS_KM,
) -> MedicineListResponse:
    """Search inventories by name or category.

    Without an origin results are alphabetical. With one they are ranked by
    the distance of the pharmacy holding them and limited to ``radius_km``.
    """
    query = select(InventoryItem, MedicalShop).join(MedicalShop, InventoryItem.shop_id == MedicalShop.id)
    if q and q.strip():
        pattern = f"%{q.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(InventoryItem.name).like(pattern),
                func.lower(InventoryItem.category).like(pattern),
            )
        )
    query = query.order_by(InventoryItem.name, InventoryItem.id)
    rows = (await session.execute(query)).all()

    if origin is None:
        items = [_to_schema(item, shop) for item, shop in rows]
        return MedicineListResponse(items=items, total=len(items))

    candidates = [
        LocationRecord(id=item.id, latitude=shop.latitude, longitude=shop.longitude, payload=(item, shop))
        for item, shop in rows
    ]
    ranked = rank_nearby(origin, candidates, radius_km)
    items = [_to_schema(*entry.payload, distance=entry.distance_km) for entry in ranked]
    return MedicineListResponse(items=items, total=len(items))


async def resolve_cart_item(
    session: AsyncSession,
    product_id: UUID,
    origin: Optional[GeoPoint] = None,
) -> CartItemInput:
    """Build the cart input for an inventory item.

    Raises:
        InventoryItemNotFoundError: unknown product id
        OutOfStockError: the item has no stock
    """
    result = await session.execute(
        select(InventoryItem, MedicalShop)
        .join(MedicalShop, InventoryItem.shop_id == MedicalShop.id)
        .where(InventoryItem.id == product_id)
    )
    row = result.first()
    if row is None:
        raise InventoryItemNotFoundError(str(product_id))

    item, shop = row
    if item.stock <= 0:
        raise OutOfStockError(item.name)

    distance_label = ""
    if origin is not None and has_location(shop.latitude, shop.longitude):
        distance_label = format_distance(distance_km(origin, GeoPoint(shop.latitude, shop.longitude)))

    return CartItemInput(
        product_id=item.id,
        name=item.name,
        unit_price=item.price,
        seller_label=shop.shop_name,
        seller_distance_label=distance_label,
    )


__all__ = ["OutOfStockError", "resolve_cart_item", "search_medicines"]
