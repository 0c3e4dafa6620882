"""
SQLAlchemy cart storage — one row per cart key, payload as JSON text.

Usage:
    session_factory, engine = await create_database(url)
    storage = SQLAlchemyCartStorage(session_factory, key=f"cart:{user_id}")
    store = CartStore(storage)
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from kungfu import Result, Ok, Error

from atelier.db import Base
from atelier.cart._types import LineItem
from atelier.cart._storage_types import StorageError
from atelier.cart._codec import encode_items, decode_items, decode_stale_order_id
from atelier.cart._storage import DEFAULT_CART_KEY


# ═══════════════════════════════════════════════════════════════════════════════
# Carts Table
# ═══════════════════════════════════════════════════════════════════════════════


class CartTable(Base):
    __tablename__ = "carts"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Storage
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyCartStorage:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        key: str = DEFAULT_CART_KEY,
    ) -> None:
        self._session_factory = session_factory
        self.key = key

    async def read_cart(self) -> Result[tuple[LineItem, ...] | None, StorageError]:
        match await self._payload():
            case Ok(None):
                return Ok(None)
            case Ok(payload):
                return decode_items(payload)
            case Error(err):
                return Error(err)

    async def read_stale_order_id(self) -> Result[str | None, StorageError]:
        match await self._payload():
            case Ok(None):
                return Ok(None)
            case Ok(payload):
                return decode_stale_order_id(payload)
            case Error(err):
                return Error(err)

    async def write_cart(
        self,
        items: tuple[LineItem, ...],
        *,
        stale_order_id: str | None = None,
    ) -> Result[None, StorageError]:
        payload = encode_items(items, stale_order_id)
        try:
            async with self._session_factory() as session:
                await session.merge(CartTable(
                    key=self.key,
                    payload=payload,
                    updated_at=datetime.now(timezone.utc),
                ))
                await session.commit()
        except SQLAlchemyError as e:
            return Error(StorageError(f"Failed to write cart {self.key}: {e}", e))
        return Ok(None)

    async def _payload(self) -> Result[str | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CartTable, self.key)
                return Ok(row.payload if row is not None else None)
        except SQLAlchemyError as e:
            return Error(StorageError(f"Failed to read cart {self.key}: {e}", e))


__all__ = ("CartTable", "SQLAlchemyCartStorage")
