"""
Catalog record — validation of raw backend product rows.

Backend rows are loosely typed. They are validated here, once, and turned
into a `ProductSnapshot` via `to_domain()`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from kungfu import Result, Ok, Error

from atelier.money import to_cents
from atelier.catalog._types import ProductSnapshot, CatalogError


class BrandRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str


class ProductRecord(BaseModel):
    """Product row as returned by the catalog backend."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    brand_id: str | None = None
    brand: BrandRecord | None = None
    images: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    stock_quantity: int = Field(default=0, ge=0)

    @field_validator("price", mode="before")
    @classmethod
    def _reject_float(cls, value: Any) -> Any:
        # Floats from JSON are re-read through str to drop binary noise
        if isinstance(value, float):
            return str(value)
        return value

    def to_domain(self) -> ProductSnapshot:
        brand = self.brand.name if self.brand is not None else (self.brand_id or "")
        return ProductSnapshot(
            id=self.id,
            name=self.name,
            unit_price=to_cents(self.price),
            brand=brand,
            image=self.images[0] if self.images else None,
            stock_quantity=self.stock_quantity,
            sizes=tuple(self.sizes),
            colors=tuple(self.colors),
        )


def parse_product(raw: dict[str, Any]) -> Result[ProductSnapshot, CatalogError]:
    """
    Validate a raw backend row.

    Example:
        match parse_product(row):
            case Ok(snapshot): ...
            case Error(err): print(err.message)
    """
    try:
        record = ProductRecord.model_validate(raw)
    except ValidationError as e:
        product_id = str(raw.get("id", ""))
        problems = ", ".join(
            ".".join(str(p) for p in err["loc"]) for err in e.errors()
        )
        return Error(CatalogError(product_id, f"Invalid product record: {problems}"))
    return Ok(record.to_domain())


__all__ = ("BrandRecord", "ProductRecord", "parse_product")
