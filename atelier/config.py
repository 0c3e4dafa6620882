"""
Settings — every tunable in one immutable object.

    settings = (
        Settings()
        .with_pricing(PricingRules().with_tax_rate("0.0725"))
        .with_checkout(CheckoutPolicy().with_payment_timeout(seconds=10))
        .with_database_url("sqlite+aiosqlite:///shop.db")
    )
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from atelier.pricing import PricingRules, DEFAULT_RULES
from atelier.checkout import CheckoutPolicy, DEFAULT_POLICY
from atelier.cart import DEFAULT_CART_KEY


@dataclass(frozen=True, slots=True)
class Settings:
    pricing: PricingRules = DEFAULT_RULES
    checkout: CheckoutPolicy = DEFAULT_POLICY
    cart_key: str = DEFAULT_CART_KEY
    database_url: str = "sqlite+aiosqlite:///:memory:"

    def with_pricing(self, rules: PricingRules) -> Settings:
        return replace(self, pricing=rules)

    def with_checkout(self, policy: CheckoutPolicy) -> Settings:
        return replace(self, checkout=policy)

    def with_cart_key(self, key: str) -> Settings:
        if not key:
            raise ValueError("cart key must not be empty")
        return replace(self, cart_key=key)

    def with_database_url(self, url: str) -> Settings:
        return replace(self, database_url=url)


DEFAULT_SETTINGS = Settings()

__all__ = ("Settings", "DEFAULT_SETTINGS")
