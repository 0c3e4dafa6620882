"""
Catalog collaborator — the only source of product snapshots for Add.
"""

from __future__ import annotations

from typing import Any, Protocol

from kungfu import Result, Ok, Error

from atelier.catalog._types import ProductSnapshot, CatalogError
from atelier.catalog._record import parse_product


class Catalog(Protocol):
    """
    Catalog protocol.

    Implement this over the real backend. Lookup failures are returned,
    not raised.
    """

    async def get_product(self, product_id: str) -> Result[ProductSnapshot, CatalogError]:
        ...


class MemoryCatalog:
    """
    In-memory catalog built from raw product rows.

    Note: For tests and local runs. Rows go through the same validation as
    backend data.
    """

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self._rows: dict[str, dict[str, Any]] = {}
        for row in rows or []:
            self.put(row)

    def put(self, row: dict[str, Any]) -> None:
        self._rows[str(row["id"])] = dict(row)

    async def get_product(self, product_id: str) -> Result[ProductSnapshot, CatalogError]:
        row = self._rows.get(product_id)
        if row is None:
            return Error(CatalogError(product_id, f"Product {product_id} not found"))
        return parse_product(row)


__all__ = ("Catalog", "MemoryCatalog")
