"""
Pricing engine — pure summary computation.

No I/O, no hidden state: equal lines and equal rules give equal summaries.
"""

from __future__ import annotations

from collections.abc import Iterable

from atelier._types import Cents
from atelier.money import percent_of
from atelier.pricing._types import PricedLine, OrderSummary, EMPTY_SUMMARY
from atelier.pricing._rules import PricingRules, DEFAULT_RULES


def shipping_for(subtotal: Cents, rules: PricingRules = DEFAULT_RULES) -> Cents:
    """Threshold shipping: free at or above the threshold."""
    if subtotal >= rules.free_shipping_threshold:
        return 0
    return rules.standard_shipping


def summarize(
    lines: Iterable[PricedLine],
    rules: PricingRules = DEFAULT_RULES,
) -> OrderSummary:
    """
    Derive the order summary for `lines`.

    An empty list is never charged shipping.

    Example:
        summary = summarize(state.items)
        summary.total  # cents
    """
    lines = tuple(lines)
    if not lines:
        return EMPTY_SUMMARY

    subtotal = sum(line.unit_price * line.quantity for line in lines)
    item_count = sum(line.quantity for line in lines)
    tax = percent_of(subtotal, rules.tax_rate)
    shipping = shipping_for(subtotal, rules)
    discount = max(0, min(rules.discount.discount_for(subtotal, shipping), subtotal))

    return OrderSummary(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        total=subtotal + tax + shipping - discount,
        item_count=item_count,
    )


__all__ = ("shipping_for", "summarize")
