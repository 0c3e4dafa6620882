"""
Core types for atelier.

Re-exports from kungfu/combinators + custom type aliases.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Cents = int
"""Monetary amount in integer minor units (USD cents)."""

type Clock = Callable[[], datetime]
"""Source of the current time. Injected so tests can pin it."""

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""


def utcnow() -> datetime:
    """Default clock: timezone-aware UTC now."""
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "Cents",
    "Clock",
    "Lazy",
    "utcnow",
)
