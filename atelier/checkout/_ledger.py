"""
Submission ledger — one record per checkout token.

    PENDING   → a submission with this token is in flight (or died mid-way)
    COMPLETED → an order exists for this token

Failed submissions release their token so the user can retry.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from kungfu import Result, Ok, Error

from atelier._types import Clock, utcnow
from atelier.cart import StorageError


class SubmissionState(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class Submission:
    token: str
    state: SubmissionState
    order_id: str | None
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SubmissionLedger(Protocol):
    """
    Ledger contract. All methods return Result.
    """

    async def get(self, token: str) -> Result[Submission | None, StorageError]:
        """Live record for `token`. Expired records read as None."""
        ...

    async def begin(self, token: str, ttl: timedelta) -> Result[bool, StorageError]:
        """
        Atomically record PENDING.

        Returns Ok(True) if recorded, Ok(False) if a live record exists.
        """
        ...

    async def complete(
        self, token: str, order_id: str, ttl: timedelta
    ) -> Result[None, StorageError]:
        ...

    async def release(self, token: str) -> Result[bool, StorageError]:
        """Forget `token`. Returns Ok(True) if it existed."""
        ...


class MemoryLedger:
    """
    In-memory ledger.

    Note: Single process only. Good for tests and single-device clients.
    """

    def __init__(self, *, clock: Clock = utcnow) -> None:
        self._records: dict[str, Submission] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get(self, token: str) -> Result[Submission | None, StorageError]:
        record = self._records.get(token)
        if record is None or record.is_expired(self._clock()):
            return Ok(None)
        return Ok(record)

    async def begin(self, token: str, ttl: timedelta) -> Result[bool, StorageError]:
        async with self._lock:
            now = self._clock()
            existing = self._records.get(token)
            if existing is not None and not existing.is_expired(now):
                return Ok(False)
            self._records[token] = Submission(
                token, SubmissionState.PENDING, None, now, now + ttl
            )
            return Ok(True)

    async def complete(
        self, token: str, order_id: str, ttl: timedelta
    ) -> Result[None, StorageError]:
        async with self._lock:
            existing = self._records.get(token)
            if existing is None:
                return Error(StorageError(f"No submission recorded for {token}"))
            now = self._clock()
            self._records[token] = Submission(
                token, SubmissionState.COMPLETED, order_id, existing.created_at, now + ttl
            )
            return Ok(None)

    async def release(self, token: str) -> Result[bool, StorageError]:
        async with self._lock:
            return Ok(self._records.pop(token, None) is not None)


__all__ = (
    "SubmissionState",
    "Submission",
    "SubmissionLedger",
    "MemoryLedger",
)
