"""
Cart storage — typed persistence protocol.

All methods return Result for explicit error handling. Back ends store the
encoded payload from `_codec`, so every back end round-trips the same way.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog
from kungfu import Result, Ok, Error

from atelier.cart._types import LineItem
from atelier.cart._storage_types import StorageError
from atelier.cart._codec import encode_items, decode_items, decode_stale_order_id

logger = structlog.get_logger(__name__)

DEFAULT_CART_KEY = "atelier_cart"


# ═══════════════════════════════════════════════════════════════════════════════
# CartStorage Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CartStorage(Protocol):
    """
    Durable home of the cart's line items.

    Note: `read_cart` returns Ok(None) when nothing was ever written.
    Corrupt data is an Error; the store treats both as an empty cart.

    `stale_order_id` travels with the lines: it marks lines an order was
    already placed from, and must survive a restart.
    """

    async def read_cart(self) -> Result[tuple[LineItem, ...] | None, StorageError]:
        ...

    async def read_stale_order_id(self) -> Result[str | None, StorageError]:
        ...

    async def write_cart(
        self,
        items: tuple[LineItem, ...],
        *,
        stale_order_id: str | None = None,
    ) -> Result[None, StorageError]:
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Storage — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCartStorage:
    """
    In-memory key/value storage.

    Keeps the encoded payload, not the objects, so reads go through the
    codec exactly like a real back end.
    """

    def __init__(self, key: str = DEFAULT_CART_KEY) -> None:
        self.key = key
        self.values: dict[str, str] = {}
        self.writes = 0

    async def read_cart(self) -> Result[tuple[LineItem, ...] | None, StorageError]:
        payload = self.values.get(self.key)
        if payload is None:
            return Ok(None)
        return decode_items(payload)

    async def read_stale_order_id(self) -> Result[str | None, StorageError]:
        payload = self.values.get(self.key)
        if payload is None:
            return Ok(None)
        return decode_stale_order_id(payload)

    async def write_cart(
        self,
        items: tuple[LineItem, ...],
        *,
        stale_order_id: str | None = None,
    ) -> Result[None, StorageError]:
        self.values[self.key] = encode_items(items, stale_order_id)
        self.writes += 1
        return Ok(None)


# ═══════════════════════════════════════════════════════════════════════════════
# File Storage
# ═══════════════════════════════════════════════════════════════════════════════


class FileCartStorage:
    """
    One JSON file per cart.

    Writes go to a temp file in the same directory and are renamed over the
    target, so a crash mid-write leaves the previous cart intact.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    async def read_cart(self) -> Result[tuple[LineItem, ...] | None, StorageError]:
        try:
            payload = await asyncio.to_thread(self._read)
        except OSError as e:
            return Error(StorageError(f"Failed to read {self.path}", e))
        if payload is None:
            return Ok(None)
        return decode_items(payload)

    async def read_stale_order_id(self) -> Result[str | None, StorageError]:
        try:
            payload = await asyncio.to_thread(self._read)
        except OSError as e:
            return Error(StorageError(f"Failed to read {self.path}", e))
        if payload is None:
            return Ok(None)
        return decode_stale_order_id(payload)

    async def write_cart(
        self,
        items: tuple[LineItem, ...],
        *,
        stale_order_id: str | None = None,
    ) -> Result[None, StorageError]:
        payload = encode_items(items, stale_order_id)
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError as e:
            logger.warning("cart.file_write_failed", path=str(self.path), error=str(e))
            return Error(StorageError(f"Failed to write {self.path}", e))
        return Ok(None)

    def _read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".cart-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


__all__ = (
    "DEFAULT_CART_KEY",
    "CartStorage",
    "MemoryCartStorage",
    "FileCartStorage",
)
