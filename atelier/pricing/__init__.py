"""
Pricing — order summaries from cart lines.

    from atelier import pricing as P

    summary = P.summarize(items, P.PricingRules())
"""

from atelier.pricing._types import PricedLine, OrderSummary, EMPTY_SUMMARY
from atelier.pricing._rules import (
    DiscountRule,
    NoDiscount,
    NO_DISCOUNT,
    PromoKind,
    PromoCode,
    PricingRules,
    DEFAULT_RULES,
)
from atelier.pricing._engine import shipping_for, summarize

__all__ = (
    "PricedLine",
    "OrderSummary",
    "EMPTY_SUMMARY",
    "DiscountRule",
    "NoDiscount",
    "NO_DISCOUNT",
    "PromoKind",
    "PromoCode",
    "PricingRules",
    "DEFAULT_RULES",
    "shipping_for",
    "summarize",
)
