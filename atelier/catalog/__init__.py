"""
Catalog — product snapshots handed to the cart.

    from atelier import catalog

    snapshot = await catalog.MemoryCatalog(rows).get_product("p1")
"""

from atelier.catalog._types import ProductSnapshot, CatalogError
from atelier.catalog._record import BrandRecord, ProductRecord, parse_product
from atelier.catalog._catalog import Catalog, MemoryCatalog

__all__ = (
    "ProductSnapshot",
    "CatalogError",
    "BrandRecord",
    "ProductRecord",
    "parse_product",
    "Catalog",
    "MemoryCatalog",
)
