"""
Shipping — postal address and the catalog of shipping methods.
"""

from __future__ import annotations

from dataclasses import dataclass

from atelier._types import Cents
from atelier.money import format_money


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    first_name: str
    last_name: str
    address1: str
    city: str
    state: str
    postal_code: str
    country: str = "US"
    company: str | None = None
    address2: str | None = None
    phone: str | None = None


REQUIRED_ADDRESS_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "address1",
    "city",
    "state",
    "postal_code",
)

_FIELD_LABELS = {
    "first_name": "first name",
    "last_name": "last name",
    "address1": "address",
    "city": "city",
    "state": "state",
    "postal_code": "postal code",
}


def missing_fields(address: ShippingAddress | None) -> tuple[str, ...]:
    """Required fields that are empty or whitespace. All of them if no address."""
    if address is None:
        return REQUIRED_ADDRESS_FIELDS
    return tuple(
        name
        for name in REQUIRED_ADDRESS_FIELDS
        if not str(getattr(address, name) or "").strip()
    )


def describe_missing(names: tuple[str, ...]) -> str:
    """("city",) → "missing shipping city"."""
    labels = ", ".join(_FIELD_LABELS.get(n, n) for n in names)
    return f"missing shipping {labels}"


@dataclass(frozen=True, slots=True)
class ShippingMethod:
    id: str
    name: str
    description: str
    price: Cents
    max_days: int

    @property
    def label(self) -> str:
        return f"{self.name} ({format_money(self.price)}, {self.description})"


STANDARD = ShippingMethod("standard", "Standard Shipping", "5-7 business days", 999, 7)
EXPRESS = ShippingMethod("express", "Express Shipping", "2-3 business days", 1999, 3)
OVERNIGHT = ShippingMethod("overnight", "Overnight Shipping", "Next business day", 3999, 1)

DEFAULT_SHIPPING_METHODS: tuple[ShippingMethod, ...] = (STANDARD, EXPRESS, OVERNIGHT)


def cheapest(methods: tuple[ShippingMethod, ...]) -> ShippingMethod:
    return min(methods, key=lambda m: (m.price, m.max_days))


__all__ = (
    "ShippingAddress",
    "REQUIRED_ADDRESS_FIELDS",
    "missing_fields",
    "describe_missing",
    "ShippingMethod",
    "STANDARD",
    "EXPRESS",
    "OVERNIGHT",
    "DEFAULT_SHIPPING_METHODS",
    "cheapest",
)
