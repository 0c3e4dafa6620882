"""
Line operations — pure item-list transforms.

Each function takes the current lines and returns the new lines. No I/O;
the store decides when the result is written and published.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime

from kungfu import Result, Ok, Error

from atelier.catalog import ProductSnapshot
from atelier.cart._types import LineItem, LineKey, CartError, CartErrorKind

type Lines = tuple[LineItem, ...]


def make_line_id(product_id: str, size: str | None, color: str | None) -> str:
    suffix = uuid.uuid4().hex[:12]
    return f"{product_id}-{size or 'no-size'}-{color or 'no-color'}-{suffix}"


def validate_add(
    product: ProductSnapshot,
    quantity: int,
    size: str | None,
    color: str | None,
) -> Result[None, CartError]:
    """Checks done before touching the store."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        return Error(CartError(
            CartErrorKind.VALIDATION,
            f"Quantity must be a whole number of at least 1, got {quantity!r}",
        ))
    if size and product.sizes and size not in product.sizes:
        return Error(CartError(
            CartErrorKind.VALIDATION,
            f"Size {size} is not available for {product.name}",
        ))
    if color and product.colors and color not in product.colors:
        return Error(CartError(
            CartErrorKind.VALIDATION,
            f"Color {color} is not available for {product.name}",
        ))
    return Ok(None)


def add_line(
    lines: Lines,
    product: ProductSnapshot,
    quantity: int,
    size: str | None,
    color: str | None,
    *,
    now: datetime,
    line_id: str | None = None,
) -> Lines:
    """
    Merge into the line with the same key, or append a new one.

    A merge keeps the existing line's id, locked price and snapshot.
    """
    key = LineKey(product.id, size, color)
    for index, line in enumerate(lines):
        if line.key == key:
            merged = replace(line, quantity=line.quantity + quantity)
            return (*lines[:index], merged, *lines[index + 1:])

    new_line = LineItem(
        id=line_id or make_line_id(product.id, size, color),
        product=product,
        quantity=quantity,
        unit_price=product.unit_price,
        selected_size=size,
        selected_color=color,
        added_at=now,
    )
    return (*lines, new_line)


def remove_line(lines: Lines, line_id: str) -> Lines:
    return tuple(line for line in lines if line.id != line_id)


def set_quantity(lines: Lines, line_id: str, quantity: int) -> Lines:
    """Replace a line's quantity. Zero or less removes the line."""
    if quantity <= 0:
        return remove_line(lines, line_id)
    return tuple(
        replace(line, quantity=quantity) if line.id == line_id else line
        for line in lines
    )


__all__ = (
    "Lines",
    "make_line_id",
    "validate_add",
    "add_line",
    "remove_line",
    "set_quantity",
)
