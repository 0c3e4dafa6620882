"""
Order types — the durable result of a checkout.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from atelier.cart import LineItem
from atelier.pricing import OrderSummary
from atelier.shipping import ShippingAddress, ShippingMethod
from atelier.payment import PaymentMethodRef


# ═══════════════════════════════════════════════════════════════════════════════
# Order Status — Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    """
    Lifecycle:
        PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
        PENDING | CONFIRMED | PROCESSING → CANCELLED | REFUNDED
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


_ABORTABLE = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED}) | _ABORTABLE,
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING}) | _ABORTABLE,
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}) | _ABORTABLE,
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Order:
    """
    Snapshot of a submitted checkout.

    `summary` is the cart summary as it stood at submission.
    `charged` is what was actually charged: the same subtotal and tax with
    the chosen shipping method's price in place of the threshold shipping.
    """

    id: str
    order_number: str
    status: OrderStatus
    items: tuple[LineItem, ...]
    summary: OrderSummary
    charged: OrderSummary
    shipping_address: ShippingAddress
    shipping_method: ShippingMethod
    payment_method: PaymentMethodRef
    payment_confirmation_id: str
    idempotency_key: str
    created_at: datetime
    updated_at: datetime
    estimated_delivery: datetime

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self.status]


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class OrderErrorKind(Enum):
    PERSISTENCE = auto()
    NOT_FOUND = auto()
    DUPLICATE = auto()  # Same id or idempotency key already stored
    INVALID_STATUS = auto()  # Transition not allowed from current status


@dataclass(frozen=True, slots=True)
class OrderError:
    kind: OrderErrorKind
    message: str


__all__ = (
    "OrderStatus",
    "TRANSITIONS",
    "Order",
    "OrderErrorKind",
    "OrderError",
)
