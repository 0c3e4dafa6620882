"""
SQLAlchemy order repository.

Queryable columns are real columns; the full snapshot (lines, summaries,
address, method) is kept as JSON in `payload`.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Integer, Text, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from kungfu import Result, Ok, Error

from atelier._types import Clock, utcnow
from atelier.db import Base
from atelier.orders._types import Order, OrderStatus, OrderError, OrderErrorKind
from atelier.orders._lifecycle import transition
from atelier.orders._codec import encode_order, decode_order


# ═══════════════════════════════════════════════════════════════════════════════
# Orders Table
# ═══════════════════════════════════════════════════════════════════════════════


class OrderTable(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    idempotency_key: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Repository
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyOrderRepository:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def create_order(self, order: Order) -> Result[None, OrderError]:
        try:
            async with self._session_factory() as session:
                session.add(_to_row(order))
                await session.commit()
        except IntegrityError as e:
            return Error(OrderError(OrderErrorKind.DUPLICATE, f"Order {order.id} exists: {e.orig}"))
        except SQLAlchemyError as e:
            return Error(OrderError(OrderErrorKind.PERSISTENCE, f"Failed to store order: {e}"))
        return Ok(None)

    async def get(self, order_id: str) -> Result[Order, OrderError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                if row is None:
                    return Error(OrderError(OrderErrorKind.NOT_FOUND, f"Order {order_id} not found"))
                return Ok(decode_order(row.payload))
        except SQLAlchemyError as e:
            return Error(OrderError(OrderErrorKind.PERSISTENCE, f"Failed to load order: {e}"))

    async def find_by_idempotency_key(self, key: str) -> Result[Order | None, OrderError]:
        try:
            async with self._session_factory() as session:
                stmt = select(OrderTable).where(OrderTable.idempotency_key == key)
                row = (await session.execute(stmt)).scalar_one_or_none()
                return Ok(decode_order(row.payload) if row is not None else None)
        except SQLAlchemyError as e:
            return Error(OrderError(OrderErrorKind.PERSISTENCE, f"Failed to load order: {e}"))

    async def update_status(self, order_id: str, status: OrderStatus) -> Result[Order, OrderError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                if row is None:
                    return Error(OrderError(OrderErrorKind.NOT_FOUND, f"Order {order_id} not found"))

                match transition(decode_order(row.payload), status, self._clock()):
                    case Error(err):
                        return Error(err)
                    case Ok(updated):
                        row.status = updated.status.value
                        row.updated_at = updated.updated_at
                        row.payload = encode_order(updated)
                        await session.commit()
                        return Ok(updated)
        except SQLAlchemyError as e:
            return Error(OrderError(OrderErrorKind.PERSISTENCE, f"Failed to update order: {e}"))


def _to_row(order: Order) -> OrderTable:
    return OrderTable(
        id=order.id,
        order_number=order.order_number,
        idempotency_key=order.idempotency_key,
        status=order.status.value,
        total_cents=order.charged.total,
        payload=encode_order(order),
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


__all__ = ("OrderTable", "SQLAlchemyOrderRepository")
