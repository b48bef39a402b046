"""In-memory shopping cart owned by a single user session."""
from __future__ import annotations

import logging
import math
import re
import threading
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Hashable, Optional

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("cod", "upi", "card")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class EmptySelectionError(Exception):
    """Raised when checking out a cart with no selected lines."""


class UnsupportedPaymentMethodError(ValueError):
    """Raised when checking out with a payment method other than cod, upi or card."""


def _money(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CartItemInput:
    product_id: Hashable
    name: str
    unit_price: float
    seller_label: str = ""
    seller_distance_label: str = ""


@dataclass
class CartLine:
    product_id: Hashable
    name: str
    unit_price: float
    seller_label: str
    seller_distance_label: str
    quantity: int = 1
    selected: bool = True

    @property
    def line_total(self) -> float:
        return _money(Decimal(str(self.unit_price)) * self.quantity)


@dataclass(frozen=True)
class OrderSummary:
    lines: list[CartLine]
    total: float
    payment_method: str
    status: str = "placed"

    @property
    def item_count(self) -> int:
        return len(self.lines)


def coerce_quantity(raw: Any) -> int:
    """Turn raw quantity input into an integer the cart accepts.

    Mirrors the quantity box: the leading integer of the input is used and
    anything unparsable, or zero, becomes 1. Negative numbers pass through so
    ``Cart.set_quantity`` removes the line.
    """
    if isinstance(raw, bool):
        return 1
    if isinstance(raw, int):
        return raw or 1
    if isinstance(raw, float):
        if not math.isfinite(raw):
            return 1
        return int(raw) or 1
    match = _LEADING_INT.match(str(raw)) if raw is not None else None
    if not match:
        return 1
    return int(match.group(1)) or 1


class Cart:
    """Line items keyed by product id, kept in insertion order."""

    def __init__(self) -> None:
        self._lines: dict[Hashable, CartLine] = {}

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: Hashable) -> bool:
        return product_id in self._lines

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def get(self, product_id: Hashable) -> Optional[CartLine]:
        return self._lines.get(product_id)

    def add_item(self, item: CartItemInput) -> CartLine:
        line = self._lines.get(item.product_id)
        if line is not None:
            line.quantity += 1
            return line

        line = CartLine(
            product_id=item.product_id,
            name=item.name,
            unit_price=item.unit_price,
            seller_label=item.seller_label,
            seller_distance_label=item.seller_distance_label,
        )
        self._lines[item.product_id] = line
        return line

    def remove_item(self, product_id: Hashable) -> None:
        self._lines.pop(product_id, None)

    def set_quantity(self, product_id: Hashable, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return
        line = self._lines.get(product_id)
        if line is not None:
            line.quantity = quantity

    def toggle_selected(self, product_id: Hashable) -> None:
        line = self._lines.get(product_id)
        if line is not None:
            line.selected = not line.selected

    def select_all(self, selected: bool) -> None:
        for line in self._lines.values():
            line.selected = selected

    def clear(self) -> None:
        self._lines.clear()

    def total_item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def total_selected_cost(self) -> float:
        total = sum(
            (Decimal(str(line.unit_price)) * line.quantity for line in self._lines.values() if line.selected),
            Decimal("0"),
        )
        return _money(total)

    def selected_lines(self) -> list[CartLine]:
        return [line for line in self._lines.values() if line.selected]

    def all_selected(self) -> bool:
        return bool(self._lines) and all(line.selected for line in self._lines.values())


def checkout(cart: Cart, payment_method: str) -> OrderSummary:
    """Simulated purchase of the selected lines.

    Nothing is charged. The selected lines are snapshotted, priced, then
    removed from the cart one by one.
    """
    if payment_method not in PAYMENT_METHODS:
        raise UnsupportedPaymentMethodError(f"Unsupported payment method: {payment_method}")

    selected = cart.selected_lines()
    if not selected:
        raise EmptySelectionError("No items selected")

    summary = OrderSummary(
        lines=[replace(line) for line in selected],
        total=cart.total_selected_cost(),
        payment_method=payment_method,
    )
    for line in selected:
        cart.remove_item(line.product_id)

    logger.info("Order placed: %d items, total %.2f via %s", summary.item_count, summary.total, payment_method)
    return summary


class CartRegistry:
    """Holds one cart per owner for the lifetime of the process."""

    def __init__(self) -> None:
        self._carts: dict[Hashable, Cart] = {}
        self._lock = threading.Lock()

    def get(self, owner: Hashable) -> Cart:
        with self._lock:
            cart = self._carts.get(owner)
            if cart is None:
                cart = self._carts[owner] = Cart()
            return cart

    def discard(self, owner: Hashable) -> None:
        with self._lock:
            self._carts.pop(owner, None)

    def __len__(self) -> int:
        return len(self._carts)


_registry = CartRegistry()


def get_cart_registry() -> CartRegistry:
    return _registry


__all__ = [
    "PAYMENT_METHODS",
    "Cart",
    "CartItemInput",
    "CartLine",
    "CartRegistry",
    "EmptySelectionError",
    "OrderSummary",
    "UnsupportedPaymentMethodError",
    "checkout",
    "coerce_quantity",
    "get_cart_registry",
]
