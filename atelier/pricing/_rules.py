"""
Pricing rules — constants plus the pluggable discount rule.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Protocol

from atelier._types import Cents
from atelier.money import percent_of


# ═══════════════════════════════════════════════════════════════════════════════
# Discount — extension point
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountRule(Protocol):
    """
    Discount rule protocol.

    Receives the subtotal and the computed shipping, returns the discount in
    cents. The engine clamps the result to [0, subtotal].
    """

    def discount_for(self, subtotal: Cents, shipping: Cents) -> Cents: ...


@dataclass(frozen=True, slots=True)
class NoDiscount:
    """Base model: nothing off."""

    def discount_for(self, subtotal: Cents, shipping: Cents) -> Cents:
        return 0


NO_DISCOUNT = NoDiscount()


class PromoKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True, slots=True)
class PromoCode:
    """
    Promo code as a discount rule.

    PERCENTAGE: `value` is a percent (15 → 15% of subtotal).
    FIXED: `value` is cents off.

    Example:
        rules = PricingRules().with_discount(PromoCode("SPRING15", PromoKind.PERCENTAGE, 15))
    """

    code: str
    kind: PromoKind
    value: int
    min_order: Cents = 0
    max_discount: Cents | None = None

    def discount_for(self, subtotal: Cents, shipping: Cents) -> Cents:
        if subtotal < self.min_order:
            return 0
        match self.kind:
            case PromoKind.PERCENTAGE:
                amount = percent_of(subtotal, Decimal(self.value) / 100)
            case PromoKind.FIXED:
                amount = self.value
        if self.max_discount is not None:
            amount = min(amount, self.max_discount)
        return amount


# ═══════════════════════════════════════════════════════════════════════════════
# PricingRules — Full Configuration
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricingRules:
    """
    Pricing rule constants.

    Fluent builder: each method returns new rules.

    Example:
        rules = (
            PricingRules()
            .with_tax_rate(Decimal("0.0725"))
            .with_free_shipping_threshold(15000)
        )
    """

    tax_rate: Decimal = Decimal("0.08")
    free_shipping_threshold: Cents = 10000
    standard_shipping: Cents = 999
    discount: DiscountRule = NO_DISCOUNT

    def with_tax_rate(self, rate: Decimal | str) -> PricingRules:
        return replace(self, tax_rate=Decimal(rate))

    def with_free_shipping_threshold(self, cents: Cents) -> PricingRules:
        return replace(self, free_shipping_threshold=cents)

    def with_standard_shipping(self, cents: Cents) -> PricingRules:
        return replace(self, standard_shipping=cents)

    def with_discount(self, rule: DiscountRule) -> PricingRules:
        return replace(self, discount=rule)


DEFAULT_RULES = PricingRules()


__all__ = (
    "DiscountRule",
    "NoDiscount",
    "NO_DISCOUNT",
    "PromoKind",
    "PromoCode",
    "PricingRules",
    "DEFAULT_RULES",
)
