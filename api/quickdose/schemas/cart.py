from __future__ import annotations

from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from quickdose.services.cart import Cart, CartLine, OrderSummary


def _rupees(amount: float) -> str:
    """Amount as shown on the order toast: paise kept, trailing zeros dropped."""
    return f"{amount:.2f}".rstrip("0").rstrip(".")


class CartAddRequest(BaseModel):
    product_id: UUID
    # Buyer position, used only for the seller distance label
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class CartQuantityRequest(BaseModel):
    # Raw input from the quantity box; coerced server-side.
    quantity: Any = None


class CartSelectAllRequest(BaseModel):
    selected: bool


class CheckoutRequest(BaseModel):
    payment_method: Literal["cod", "upi", "card"]


class CartLineSchema(BaseModel):
    product_id: str
    name: str
    unit_price: float
    seller_label: str
    seller_distance_label: str
    quantity: int
    selected: bool
    line_total: float

    @classmethod
    def from_line(cls, line: CartLine) -> "CartLineSchema":
        return cls(
            product_id=str(line.product_id),
            name=line.name,
            unit_price=line.unit_price,
            seller_label=line.seller_label,
            seller_distance_label=line.seller_distance_label,
            quantity=line.quantity,
            selected=line.selected,
            line_total=line.line_total,
        )


class CartResponse(BaseModel):
    items: list[CartLineSchema]
    total_item_count: int
    total_selected_cost: float
    all_selected: bool

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartResponse":
        return cls(
            items=[CartLineSchema.from_line(line) for line in cart.lines],
            total_item_count=cart.total_item_count(),
            total_selected_cost=cart.total_selected_cost(),
            all_selected=cart.all_selected(),
        )


class CheckoutResponse(BaseModel):
    status: str
    payment_method: str
    items_ordered: int
    total: float
    items: list[CartLineSchema]
    message: str

    @classmethod
    def from_summary(cls, summary: OrderSummary) -> "CheckoutResponse":
        return cls(
            status=summary.status,
            payment_method=summary.payment_method,
            items_ordered=summary.item_count,
            total=summary.total,
            items=[CartLineSchema.from_line(line) for line in summary.lines],
            message=f"Successfully ordered {summary.item_count} items for ₹{_rupees(summary.total)}",
        )


__all__ = [
    "CartAddRequest",
    "CartLineSchema",
    "CartQuantityRequest",
    "CartResponse",
    "CartSelectAllRequest",
    "CheckoutRequest",
    "CheckoutResponse",
]
