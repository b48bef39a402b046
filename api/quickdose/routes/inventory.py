from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from quickdose.core.auth import CurrentUser, require_seller
from quickdose.db.session import get_async_session
from quickdose.schemas.shops import InventoryItemCreate, InventoryItemSchema, InventoryItemUpdate, InventoryListResponse
from quickdose.services.inventory import (
    InventoryItemNotFoundError,
    create_item,
    delete_item,
    item_to_schema,
    list_items,
    update_item,
)
from quickdose.services.shops import ShopNotFoundError, get_owner_shop

router = APIRouter(prefix="/inventory", tags=["inventory"])


async def _seller_shop_id(session, user: CurrentUser) -> UUID:
    try:
        shop = await get_owner_shop(session, user.id)
    except ShopNotFoundError:
        raise HTTPException(status_code=404, detail="Register your shop first")
    return shop.id


@router.get("", response_model=InventoryListResponse)
async def inventory_list(user: CurrentUser = Depends(require_seller)) -> InventoryListResponse:
    async with get_async_session() as session:
        shop_id = await _seller_shop_id(session, user)
        return await list_items(session, shop_id)


@router.post("", response_model=InventoryItemSchema, status_code=status.HTTP_201_CREATED)
async def inventory_add(data: InventoryItemCreate, user: CurrentUser = Depends(require_seller)) -> InventoryItemSchema:
    async with get_async_session() as session:
        shop_id = await _seller_shop_id(session, user)
        item = await create_item(session, shop_id, data)
        return item_to_schema(item)


@router.patch("/{item_id}", response_model=InventoryItemSchema)
async def inventory_update(
    item_id: UUID,
    changes: InventoryItemUpdate,
    user: CurrentUser = Depends(require_seller),
) -> InventoryItemSchema:
    async with get_async_session() as session:
        shop_id = await _seller_shop_id(session, user)
        try:
            item = await update_item(session, shop_id, item_id, changes)
        except InventoryItemNotFoundError:
            raise HTTPException(status_code=404, detail="Item not found")
        return item_to_schema(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def inventory_delete(item_id: UUID, user: CurrentUser = Depends(require_seller)) -> None:
    async with get_async_session() as session:
        shop_id = await _seller_shop_id(session, user)
        try:
            await delete_item(session, shop_id, item_id)
        except InventoryItemNotFoundError:
            raise HTTPException(status_code=404, detail="Item not found")


__all__ = ["router"]
