"""
Money — integer-cents arithmetic.

All amounts inside atelier are integer cents. Decimal only appears at the
edges: parsing catalog prices and rendering for display.

    to_cents(Decimal("19.99"))      # 1999
    percent_of(25000, Decimal("0.08"))  # 2000
    format_money(27000)             # "$270.00"
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from atelier._types import Cents

_CENT = Decimal("0.01")


def to_cents(amount: Decimal | int | str) -> Cents:
    """
    Convert a major-unit amount to cents, rounding half up.

    Floats are rejected: they already carry binary drift.
    """
    if isinstance(amount, float):
        raise TypeError("float amounts are not accepted, pass Decimal or str")
    value = Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)
    return int(value * 100)


def to_decimal(cents: Cents) -> Decimal:
    """Cents → Decimal with two places."""
    return (Decimal(cents) / 100).quantize(_CENT)


def percent_of(cents: Cents, rate: Decimal) -> Cents:
    """Apply a rate to a cents amount, rounding half up to whole cents."""
    return int((Decimal(cents) * rate).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_money(cents: Cents, symbol: str = "$") -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{to_decimal(abs(cents))}"


__all__ = ("to_cents", "to_decimal", "percent_of", "format_money")
