"""
Pricing types — order summary and the line shape pricing needs.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Protocol

from atelier._types import Cents
from atelier.money import format_money


# ═══════════════════════════════════════════════════════════════════════════════
# PricedLine — what the engine reads from a line
# ═══════════════════════════════════════════════════════════════════════════════


class PricedLine(Protocol):
    """Anything with a locked unit price and a quantity."""

    @property
    def unit_price(self) -> Cents: ...

    @property
    def quantity(self) -> int: ...


# ═══════════════════════════════════════════════════════════════════════════════
# OrderSummary — derived totals
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderSummary:
    """
    Totals derived from a list of lines. All amounts in cents.

    Never patched in place: recompute from the lines, or use
    `with_shipping()` to derive a summary with a chosen shipping price.
    """

    subtotal: Cents
    tax: Cents
    shipping: Cents
    discount: Cents
    total: Cents
    item_count: int

    def with_shipping(self, shipping: Cents) -> OrderSummary:
        """Same summary with shipping replaced and total recomputed."""
        return replace(
            self,
            shipping=shipping,
            total=self.subtotal + self.tax + shipping - self.discount,
        )

    def display(self) -> dict[str, str | int]:
        """Presentation form: amounts rendered with two decimals."""
        return {
            "subtotal": format_money(self.subtotal),
            "tax": format_money(self.tax),
            "shipping": format_money(self.shipping),
            "discount": format_money(self.discount),
            "total": format_money(self.total),
            "item_count": self.item_count,
        }


EMPTY_SUMMARY = OrderSummary(
    subtotal=0, tax=0, shipping=0, discount=0, total=0, item_count=0
)


__all__ = ("PricedLine", "OrderSummary", "EMPTY_SUMMARY")
