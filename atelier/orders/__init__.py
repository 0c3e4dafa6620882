"""
Orders — the durable result of a successful checkout.

    from atelier import orders

    repo = orders.MemoryOrderRepository()
    await repo.update_status(order.id, orders.OrderStatus.PROCESSING)
"""

from atelier.orders._types import (
    OrderStatus,
    TRANSITIONS,
    Order,
    OrderErrorKind,
    OrderError,
)
from atelier.orders._lifecycle import (
    new_order_id,
    new_order_number,
    can_transition,
    transition,
)
from atelier.orders._codec import (
    StoredSummary,
    StoredAddress,
    StoredShippingMethod,
    StoredOrder,
    encode_order,
    decode_order,
)
from atelier.orders._repository import OrderRepository, MemoryOrderRepository
from atelier.orders._sqlalchemy import OrderTable, SQLAlchemyOrderRepository

__all__ = (
    "OrderStatus",
    "TRANSITIONS",
    "Order",
    "OrderErrorKind",
    "OrderError",
    "new_order_id",
    "new_order_number",
    "can_transition",
    "transition",
    "StoredSummary",
    "StoredAddress",
    "StoredShippingMethod",
    "StoredOrder",
    "encode_order",
    "decode_order",
    "OrderRepository",
    "MemoryOrderRepository",
    "OrderTable",
    "SQLAlchemyOrderRepository",
)
