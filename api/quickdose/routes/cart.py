from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from quickdose.core.auth import CurrentUser, require_user
from quickdose.db.session import get_async_session
from quickdose.schemas.cart import (
    CartAddRequest,
    CartQuantityRequest,
    CartResponse,
    CartSelectAllRequest,
    CheckoutRequest,
    CheckoutResponse,
)
from quickdose.services.cart import Cart, CartRegistry, EmptySelectionError, checkout, coerce_quantity, get_cart_registry
from quickdose.services.geospatial import GeoPoint
from quickdose.services.inventory import InventoryItemNotFoundError
from quickdose.services.medicines import OutOfStockError, resolve_cart_item

router = APIRouter(prefix="/cart", tags=["cart"])


def current_cart(
    user: CurrentUser = Depends(require_user),
    registry: CartRegistry = Depends(get_cart_registry),
) -> Cart:
    return registry.get(user.id)


@router.get("", response_model=CartResponse)
async def read_cart(cart: Cart = Depends(current_cart)) -> CartResponse:
    return CartResponse.from_cart(cart)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(payload: CartAddRequest, cart: Cart = Depends(current_cart)) -> CartResponse:
    origin = None
    if payload.latitude is not None and payload.longitude is not None:
        origin = GeoPoint(payload.latitude, payload.longitude)

    async with get_async_session() as session:
        try:
            item = await resolve_cart_item(session, payload.product_id, origin)
        except InventoryItemNotFoundError:
            raise HTTPException(status_code=404, detail="Medicine not found")
        except OutOfStockError:
            raise HTTPException(status_code=409, detail="Out of Stock")

    cart.add_item(item)
    return CartResponse.from_cart(cart)


@router.patch("/items/{product_id}", response_model=CartResponse)
async def update_quantity(
    product_id: UUID,
    payload: CartQuantityRequest,
    cart: Cart = Depends(current_cart),
) -> CartResponse:
    cart.set_quantity(product_id, coerce_quantity(payload.quantity))
    return CartResponse.from_cart(cart)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(product_id: UUID, cart: Cart = Depends(current_cart)) -> CartResponse:
    cart.remove_item(product_id)
    return CartResponse.from_cart(cart)


@router.post("/items/{product_id}/toggle", response_model=CartResponse)
async def toggle_item(product_id: UUID, cart: Cart = Depends(current_cart)) -> CartResponse:
    cart.toggle_selected(product_id)
    return CartResponse.from_cart(cart)


@router.post("/select-all", response_model=CartResponse)
async def select_all(payload: CartSelectAllRequest, cart: Cart = Depends(current_cart)) -> CartResponse:
    cart.select_all(payload.selected)
    return CartResponse.from_cart(cart)


@router.delete("", response_model=CartResponse)
async def clear_cart(cart: Cart = Depends(current_cart)) -> CartResponse:
    cart.clear()
    return CartResponse.from_cart(cart)


@router.post("/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
async def checkout_cart(payload: CheckoutRequest, cart: Cart = Depends(current_cart)) -> CheckoutResponse:
    """Simulated purchase of the selected items. Nothing is charged."""
    try:
        summary = checkout(cart, payload.payment_method)
    except EmptySelectionError:
        raise HTTPException(status_code=400, detail="No items selected")
    return CheckoutResponse.from_summary(summary)


__all__ = ["router", "current_cart"]
