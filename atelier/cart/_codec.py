"""
Cart codec — persisted representation of line items.

Stored models implement `from_domain()` / `to_domain()`; the store itself
only ever sees `LineItem`. Every LineItem field survives a round trip.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, ValidationError
from kungfu import Result, Ok, Error

from atelier.catalog import ProductSnapshot
from atelier.cart._types import LineItem
from atelier.cart._storage_types import StorageError

FORMAT_VERSION = 1


class StoredProduct(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    unit_price: int
    brand: str
    image: str | None = None
    stock_quantity: int = 0
    sizes: list[str] = []
    colors: list[str] = []

    @classmethod
    def from_domain(cls, product: ProductSnapshot) -> StoredProduct:
        return cls(
            id=product.id,
            name=product.name,
            unit_price=product.unit_price,
            brand=product.brand,
            image=product.image,
            stock_quantity=product.stock_quantity,
            sizes=list(product.sizes),
            colors=list(product.colors),
        )

    def to_domain(self) -> ProductSnapshot:
        return ProductSnapshot(
            id=self.id,
            name=self.name,
            unit_price=self.unit_price,
            brand=self.brand,
            image=self.image,
            stock_quantity=self.stock_quantity,
            sizes=tuple(self.sizes),
            colors=tuple(self.colors),
        )


class StoredLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    product: StoredProduct
    quantity: int
    unit_price: int
    selected_size: str | None = None
    selected_color: str | None = None
    added_at: datetime

    @classmethod
    def from_domain(cls, line: LineItem) -> StoredLineItem:
        return cls(
            id=line.id,
            product=StoredProduct.from_domain(line.product),
            quantity=line.quantity,
            unit_price=line.unit_price,
            selected_size=line.selected_size,
            selected_color=line.selected_color,
            added_at=line.added_at,
        )

    def to_domain(self) -> LineItem:
        return LineItem(
            id=self.id,
            product=self.product.to_domain(),
            quantity=self.quantity,
            unit_price=self.unit_price,
            selected_size=self.selected_size,
            selected_color=self.selected_color,
            added_at=self.added_at,
        )


class StoredCart(BaseModel):
    version: int = FORMAT_VERSION
    items: list[StoredLineItem]
    stale_order_id: str | None = None


def encode_items(
    items: tuple[LineItem, ...] | list[LineItem],
    stale_order_id: str | None = None,
) -> str:
    cart = StoredCart(
        items=[StoredLineItem.from_domain(line) for line in items],
        stale_order_id=stale_order_id,
    )
    return cart.model_dump_json()


def decode_cart(payload: str) -> Result[StoredCart, StorageError]:
    try:
        cart = StoredCart.model_validate_json(payload)
    except ValidationError as e:
        return Error(StorageError(f"Unreadable cart payload: {e.error_count()} errors", e))
    if cart.version != FORMAT_VERSION:
        return Error(StorageError(f"Unsupported cart format version {cart.version}"))
    return Ok(cart)


def decode_items(payload: str) -> Result[tuple[LineItem, ...], StorageError]:
    """
    Parse a persisted cart.

    Lines with quantity below 1 are dropped: they cannot exist in a live cart.
    """
    match decode_cart(payload):
        case Ok(cart):
            return Ok(tuple(stored.to_domain() for stored in cart.items if stored.quantity >= 1))
        case Error(err):
            return Error(err)


def decode_stale_order_id(payload: str) -> Result[str | None, StorageError]:
    """Order already placed from the persisted lines, if any."""
    match decode_cart(payload):
        case Ok(cart):
            return Ok(cart.stale_order_id if cart.items else None)
        case Error(err):
            return Error(err)


__all__ = (
    "FORMAT_VERSION",
    "StoredProduct",
    "StoredLineItem",
    "StoredCart",
    "encode_items",
    "decode_cart",
    "decode_items",
    "decode_stale_order_id",
)
