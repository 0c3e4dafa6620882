"""
Storage error shared by cart back ends.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StorageError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


__all__ = ("StorageError",)
