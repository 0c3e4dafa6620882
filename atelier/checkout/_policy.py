"""
Checkout policy — behavior configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta

from atelier.shipping import ShippingMethod, DEFAULT_SHIPPING_METHODS, cheapest


@dataclass(frozen=True, slots=True)
class CheckoutPolicy:
    """
    Checkout configuration.

    Fluent builder: chain methods to configure.

    Example:
        policy = (
            CheckoutPolicy()
            .with_payment_timeout(seconds=15)
            .with_clear_attempts(3)
        )

    payment_timeout: Upper bound on the payment confirmation call. Expiry is a
        failure, never an ambiguous success.
    clear_attempts: How many times the cart clear is tried after the order is
        stored, before the cart is flagged stale.
    ledger_ttl: How long a submission token is remembered.
    """

    payment_timeout: timedelta = timedelta(seconds=30)
    clear_attempts: int = 2
    shipping_methods: tuple[ShippingMethod, ...] = DEFAULT_SHIPPING_METHODS
    ledger_ttl: timedelta = timedelta(hours=24)

    def with_payment_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        timeout = delta if delta is not None else timedelta(seconds=seconds or 0)
        if timeout <= timedelta(0):
            raise ValueError("payment timeout must be positive")
        return replace(self, payment_timeout=timeout)

    def with_clear_attempts(self, attempts: int) -> CheckoutPolicy:
        if attempts < 1:
            raise ValueError("clear_attempts must be at least 1")
        return replace(self, clear_attempts=attempts)

    def with_shipping_methods(self, *methods: ShippingMethod) -> CheckoutPolicy:
        if not methods:
            raise ValueError("at least one shipping method is required")
        return replace(self, shipping_methods=methods)

    def with_ledger_ttl(
        self,
        *,
        hours: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        ttl = delta if delta is not None else timedelta(hours=hours or 0)
        if ttl <= timedelta(0):
            raise ValueError("ledger ttl must be positive")
        return replace(self, ledger_ttl=ttl)

    def method(self, method_id: str) -> ShippingMethod | None:
        for candidate in self.shipping_methods:
            if candidate.id == method_id:
                return candidate
        return None

    @property
    def default_method(self) -> ShippingMethod:
        return cheapest(self.shipping_methods)


DEFAULT_POLICY = CheckoutPolicy()

__all__ = ("CheckoutPolicy", "DEFAULT_POLICY")
