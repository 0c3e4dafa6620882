"""
Database layer — declarative base and async session factory.

Tables for the SQLAlchemy back ends of cart storage, order persistence and
the submission ledger all hang off `Base`.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create tables and return (session_factory, engine)."""
    # Imported for their side effect of registering tables on Base.
    from atelier.cart import _sqlalchemy as _cart_tables  # noqa: F401
    from atelier.orders import _sqlalchemy as _order_tables  # noqa: F401
    from atelier.checkout import _sqlalchemy as _ledger_tables  # noqa: F401

    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = ("Base", "create_database")
