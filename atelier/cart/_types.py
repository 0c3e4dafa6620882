"""
Cart types — line items, cart state, cart errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from atelier._types import Cents
from atelier.catalog import ProductSnapshot
from atelier.pricing import OrderSummary, EMPTY_SUMMARY


# ═══════════════════════════════════════════════════════════════════════════════
# LineKey — Identity of a purchasable configuration
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineKey:
    """Two lines with the same key are one line."""

    product_id: str
    size: str | None
    color: str | None


# ═══════════════════════════════════════════════════════════════════════════════
# LineItem
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    """
    One distinct purchasable configuration in the cart.

    `unit_price` is locked when the line is created; merging more of the
    same key into it never refreshes the price.
    `id` is synthetic and used for list keys and removal.
    """

    id: str
    product: ProductSnapshot
    quantity: int
    unit_price: Cents
    selected_size: str | None
    selected_color: str | None
    added_at: datetime

    @property
    def key(self) -> LineKey:
        return LineKey(self.product.id, self.selected_size, self.selected_color)

    @property
    def line_total(self) -> Cents:
        return self.unit_price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# CartState — Published read model
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartState:
    """
    Items plus the summary derived from them.

    `stale_order_id` is set when an order was placed from these items but
    the cart could not be cleared afterwards.
    """

    items: tuple[LineItem, ...] = ()
    summary: OrderSummary = EMPTY_SUMMARY
    stale_order_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, line_id: str) -> LineItem | None:
        return next((line for line in self.items if line.id == line_id), None)


EMPTY_CART = CartState()


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CartErrorKind(Enum):
    """Kinds of cart errors."""

    VALIDATION = auto()  # Rejected before any I/O
    PERSISTENCE = auto()  # Storage write failed, state unchanged
    CATALOG = auto()  # Product lookup failed


@dataclass(frozen=True, slots=True)
class CartError:
    kind: CartErrorKind
    message: str


__all__ = (
    "LineKey",
    "LineItem",
    "CartState",
    "EMPTY_CART",
    "CartErrorKind",
    "CartError",
)
