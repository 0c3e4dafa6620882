"""
Catalog types — the product snapshot the cart keeps.
"""

from __future__ import annotations

from dataclasses import dataclass

from atelier._types import Cents


@dataclass(frozen=True, slots=True)
class ProductSnapshot:
    """
    Product as seen at the moment it was added to the cart.

    The cart never re-queries the catalog for lines it already holds, so
    everything the UI shows for a line lives here.
    """

    id: str
    name: str
    unit_price: Cents
    brand: str
    image: str | None = None
    stock_quantity: int = 0
    sizes: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CatalogError:
    """Catalog lookup failed (unknown product, backend down, bad record)."""

    product_id: str
    message: str


__all__ = ("ProductSnapshot", "CatalogError")
