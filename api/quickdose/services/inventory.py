from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quickdose.db.models import InventoryItem
from quickdose.schemas.shops import InventoryItemCreate, InventoryItemSchema, InventoryItemUpdate, InventoryListResponse

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 10


class InventoryItemNotFoundError(Exception):
    pass


def stock_status(stock: int) -> str:
    if stock <= 0:
        return "out_of_stock"
    if stock < LOW_STOCK_THRESHOLD:
        return "low_stock"
    return "in_stock"


def item_to_schema(item: InventoryItem) -> InventoryItemSchema:
    return InventoryItemSchema(
        id=item.id,
        shop_id=item.shop_id,
        name=item.name,
        description=item.description,
        price=item.price,
        stock=item.stock,
        category=item.category,
        expiry_date=item.expiry_date,
        stock_status=stock_status(item.stock),
    )


async def list_items(session: AsyncSession, shop_id: UUID) -> InventoryListResponse:
    result = await session.execute(
        select(InventoryItem).where(InventoryItem.shop_id == shop_id).order_by(InventoryItem.name)
    )
    items = [item_to_schema(item) for item in result.scalars().all()]
    return InventoryListResponse(items=items, total=len(items))


async def get_shop_item(session: AsyncSession, shop_id: UUID, item_id: UUID) -> InventoryItem:
    item = await session.get(InventoryItem, item_id)
    # Items of other shops are reported as missing.
    if item is None or item.shop_id != shop_id:
        raise InventoryItemNotFoundError(str(item_id))
    return item


async def create_item(session: AsyncSession, shop_id: UUID, data: InventoryItemCreate) -> InventoryItem:
    item = InventoryItem(shop_id=shop_id, **data.model_dump())
    session.add(item)
    await session.commit()
    logger.info("Added inventory item %s to shop %s", item.id, shop_id)
    return item


async def update_item(
    session: AsyncSession,
    shop_id: UUID,
    item_id: UUID,
    changes: InventoryItemUpdate,
) -> InventoryItem:
    item = await get_shop_item(session, shop_id, item_id)
    for field, value in changes.model_dump(exclude_unset=True).items():
        setattr(item, field, value)
    await session.commit()
    return item


async def delete_item(session: AsyncSession, shop_id: UUID, item_id: UUID) -> None:
    item = await get_shop_item(session, shop_id, item_id)
    await session.delete(item)
    await session.commit()
    logger.info("Removed inventory item %s from shop %s", item_id, shop_id)


__all__ = [
    "LOW_STOCK_THRESHOLD",
    "InventoryItemNotFoundError",
    "create_item",
    "delete_item",
    "get_shop_item",
    "item_to_schema",
    "list_items",
    "stock_status",
    "update_item",
]
