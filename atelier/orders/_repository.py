"""
Order repository — typed persistence protocol.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from kungfu import Result, Ok, Error

from atelier._types import Clock, utcnow
from atelier.orders._types import Order, OrderStatus, OrderError, OrderErrorKind
from atelier.orders._lifecycle import transition


class OrderRepository(Protocol):
    """
    Order persistence contract.

    `create_order` must reject a second order with the same id or the same
    idempotency key.
    """

    async def create_order(self, order: Order) -> Result[None, OrderError]:
        ...

    async def get(self, order_id: str) -> Result[Order, OrderError]:
        ...

    async def find_by_idempotency_key(self, key: str) -> Result[Order | None, OrderError]:
        ...

    async def update_status(self, order_id: str, status: OrderStatus) -> Result[Order, OrderError]:
        ...


class MemoryOrderRepository:
    """
    In-memory order repository.

    Note: Single process only, nothing survives a restart.
    """

    def __init__(self, *, clock: Clock = utcnow) -> None:
        self._orders: dict[str, Order] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def orders(self) -> tuple[Order, ...]:
        return tuple(self._orders.values())

    async def create_order(self, order: Order) -> Result[None, OrderError]:
        async with self._lock:
            if order.id in self._orders:
                return Error(OrderError(OrderErrorKind.DUPLICATE, f"Order {order.id} exists"))
            if any(o.idempotency_key == order.idempotency_key for o in self._orders.values()):
                return Error(OrderError(
                    OrderErrorKind.DUPLICATE,
                    f"Order for submission {order.idempotency_key} exists",
                ))
            self._orders[order.id] = order
            return Ok(None)

    async def get(self, order_id: str) -> Result[Order, OrderError]:
        order = self._orders.get(order_id)
        if order is None:
            return Error(OrderError(OrderErrorKind.NOT_FOUND, f"Order {order_id} not found"))
        return Ok(order)

    async def find_by_idempotency_key(self, key: str) -> Result[Order | None, OrderError]:
        for order in self._orders.values():
            if order.idempotency_key == key:
                return Ok(order)
        return Ok(None)

    async def update_status(self, order_id: str, status: OrderStatus) -> Result[Order, OrderError]:
        async with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return Error(OrderError(OrderErrorKind.NOT_FOUND, f"Order {order_id} not found"))
            match transition(order, status, self._clock()):
                case Ok(updated):
                    self._orders[order_id] = updated
                    return Ok(updated)
                case Error(err):
                    return Error(err)


__all__ = ("OrderRepository", "MemoryOrderRepository")
