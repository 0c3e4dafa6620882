"""
Cart — line items, persistence, and the serialized cart store.

    from atelier import cart

    store = cart.CartStore(cart.MemoryCartStorage())
    await store.load()
    await store.add(product, quantity=1, size="M")
    state = store.get_state()   # items + summary, always consistent
"""

from atelier.cart._types import (
    LineKey,
    LineItem,
    CartState,
    EMPTY_CART,
    CartErrorKind,
    CartError,
)
from atelier.cart._lines import (
    make_line_id,
    validate_add,
    add_line,
    remove_line,
    set_quantity,
)
from atelier.cart._storage_types import StorageError
from atelier.cart._codec import (
    StoredProduct,
    StoredLineItem,
    StoredCart,
    encode_items,
    decode_cart,
    decode_items,
    decode_stale_order_id,
)
from atelier.cart._storage import (
    DEFAULT_CART_KEY,
    CartStorage,
    MemoryCartStorage,
    FileCartStorage,
)
from atelier.cart._store import CartStore, Listener

from atelier.cart._sqlalchemy import CartTable, SQLAlchemyCartStorage

__all__ = (
    "LineKey",
    "LineItem",
    "CartState",
    "EMPTY_CART",
    "CartErrorKind",
    "CartError",
    "make_line_id",
    "validate_add",
    "add_line",
    "remove_line",
    "set_quantity",
    "StorageError",
    "StoredProduct",
    "StoredLineItem",
    "StoredCart",
    "encode_items",
    "decode_cart",
    "decode_items",
    "decode_stale_order_id",
    "DEFAULT_CART_KEY",
    "CartStorage",
    "MemoryCartStorage",
    "FileCartStorage",
    "CartStore",
    "Listener",
    "CartTable",
    "SQLAlchemyCartStorage",
)
