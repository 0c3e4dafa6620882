"""
Order lifecycle — identifiers and status transitions.
"""

from __future__ import annotations

import secrets
import string
import uuid
from dataclasses import replace
from datetime import datetime

from kungfu import Result, Ok, Error

from atelier.orders._types import Order, OrderStatus, OrderError, OrderErrorKind, TRANSITIONS

_ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


def new_order_id() -> str:
    return f"order-{uuid.uuid4().hex}"


def new_order_number() -> str:
    """Human-facing number, e.g. "ORD-7K2M9QXA1"."""
    suffix = "".join(secrets.choice(_ORDER_NUMBER_ALPHABET) for _ in range(9))
    return f"ORD-{suffix}"


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS[current]


def transition(order: Order, status: OrderStatus, now: datetime) -> Result[Order, OrderError]:
    """
    Move an order to `status`.

    Example:
        match transition(order, OrderStatus.SHIPPED, utcnow()):
            case Ok(shipped): print(shipped.status)
            case Error(e): print(e.message)
    """
    if not can_transition(order.status, status):
        return Error(OrderError(
            OrderErrorKind.INVALID_STATUS,
            f"Order {order.order_number} cannot go from {order.status.value} to {status.value}",
        ))
    return Ok(replace(order, status=status, updated_at=now))


__all__ = ("new_order_id", "new_order_number", "can_transition", "transition")
