"""
SQLAlchemy submission ledger.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from kungfu import Result, Ok, Error

from atelier._types import Clock, utcnow
from atelier.cart import StorageError
from atelier.db import Base
from atelier.checkout._ledger import Submission, SubmissionState


class SubmissionTable(Base):
    __tablename__ = "checkout_submissions"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    state: Mapped[str] = mapped_column(String(20), nullable=False)
    order_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def _aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _to_submission(row: SubmissionTable) -> Submission:
    return Submission(
        token=row.token,
        state=SubmissionState(row.state),
        order_id=row.order_id,
        created_at=_aware(row.created_at),
        expires_at=_aware(row.expires_at),
    )


class SQLAlchemyLedger:
    """
    Ledger on a relational table; the primary key makes `begin` atomic
    across processes.

    Example:
        session_factory, _ = await create_database("sqlite+aiosqlite:///shop.db")
        ledger = SQLAlchemyLedger(session_factory)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def get(self, token: str) -> Result[Submission | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(SubmissionTable, token)
                if row is None:
                    return Ok(None)
                record = _to_submission(row)
        except SQLAlchemyError as e:
            return Error(StorageError(f"Failed to read submission: {e}", e))

        if record.is_expired(self._clock()):
            return Ok(None)
        return Ok(record)

    async def begin(self, token: str, ttl: timedelta) -> Result[bool, StorageError]:
        now = self._clock()
        try:
            async with self._session_factory() as session:
                row = await session.get(SubmissionTable, token)
                if row is not None:
                    if not _to_submission(row).is_expired(now):
                        return Ok(False)
                    await session.delete(row)
                    await session.flush()

                session.add(SubmissionTable(
                    token=token,
                    state=SubmissionState.PENDING.value,
                    order_id=None,
                    created_at=now,
                    expires_at=now + ttl,
                ))
                await session.commit()
                return Ok(True)
        except IntegrityError:
            # Lost the race to another process.
            return Ok(False)
        except SQLAlchemyError as e:
            return Error(StorageError(f"Failed to record submission: {e}", e))

    async def complete(
        self, token: str, order_id: str, ttl: timedelta
    ) -> Result[None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(SubmissionTable, token)
                if row is None:
                    return Error(StorageError(f"No submission recorded for {token}"))
                row.state = SubmissionState.COMPLETED.value
                row.order_id = order_id
                row.expires_at = self._clock() + ttl
                await session.commit()
                return Ok(None)
        except SQLAlchemyError as e:
            return Error(StorageError(f"Failed to complete submission: {e}", e))

    async def release(self, token: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(SubmissionTable, token)
                if row is None:
                    return Ok(False)
                await session.delete(row)
                await session.commit()
                return Ok(True)
        except SQLAlchemyError as e:
            return Error(StorageError(f"Failed to release submission: {e}", e))


__all__ = ("SubmissionTable", "SQLAlchemyLedger")
