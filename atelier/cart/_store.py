"""
Cart store — single source of truth for the live cart.

Every mutation runs under one lock: read current lines, compute new lines,
write them, and only after the write succeeds swap in the new state and
publish it. A failed write leaves the in-memory state untouched.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog
from kungfu import Result, Ok, Error

from atelier._types import Clock, utcnow
from atelier.catalog import ProductSnapshot, Catalog
from atelier.pricing import PricingRules, DEFAULT_RULES, summarize
from atelier.cart._types import CartState, CartError, CartErrorKind, EMPTY_CART
from atelier.cart._lines import (
    Lines,
    validate_add,
    add_line,
    remove_line,
    set_quantity,
)
from atelier.cart._storage import CartStorage

logger = structlog.get_logger(__name__)

type Listener = Callable[[CartState], None]
type Transform = Callable[[Lines], Lines | None]
"""Computes new lines from current ones. None means nothing to do."""


class CartStore:
    """
    Serialized cart store.

    Example:
        store = CartStore(MemoryCartStorage())
        await store.load()

        match await store.add(product, quantity=2, size="M"):
            case Ok(state):
                print(state.summary.total)
            case Error(e):
                print(e.message)
    """

    def __init__(
        self,
        storage: CartStorage,
        rules: PricingRules = DEFAULT_RULES,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._storage = storage
        self._rules = rules
        self._clock = clock
        self._state = EMPTY_CART
        self._lock = asyncio.Lock()
        self._listeners: list[Listener] = []

    @property
    def rules(self) -> PricingRules:
        return self._rules

    # ═══════════════════════════════════════════════════════════════════════
    # Read model
    # ═══════════════════════════════════════════════════════════════════════

    def get_state(self) -> CartState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load(self) -> CartState:
        """
        Restore lines from storage.

        Missing, empty or unreadable storage yields an empty cart. A stale
        flag saved with the lines is restored with them.
        """
        async with self._lock:
            result = await self._storage.read_cart()
            match result:
                case Ok(None):
                    lines: Lines = ()
                case Ok(stored):
                    lines = stored
                case Error(err):
                    logger.warning("cart.load_failed", error=err.message)
                    lines = ()

            stale: str | None = None
            if lines:
                match await self._storage.read_stale_order_id():
                    case Ok(order_id):
                        stale = order_id
                    case Error(err):
                        logger.warning("cart.stale_flag_unreadable", error=err.message)

            self._publish(CartState(lines, summarize(lines, self._rules), stale))
            logger.info("cart.loaded", lines=len(lines), stale_order_id=stale)
            return self._state

    # ═══════════════════════════════════════════════════════════════════════
    # Operations
    # ═══════════════════════════════════════════════════════════════════════

    async def add(
        self,
        product: ProductSnapshot,
        quantity: int = 1,
        size: str | None = None,
        color: str | None = None,
    ) -> Result[CartState, CartError]:
        """Merge into the line with the same (product, size, color) or append."""
        match validate_add(product, quantity, size, color):
            case Error(err):
                return Error(err)
            case Ok(_):
                pass

        return await self._mutate(
            lambda lines: add_line(
                lines, product, quantity, size, color, now=self._clock()
            ),
            "cart.item_added",
            product_id=product.id,
            quantity=quantity,
        )

    async def add_from_catalog(
        self,
        catalog: Catalog,
        product_id: str,
        quantity: int = 1,
        size: str | None = None,
        color: str | None = None,
    ) -> Result[CartState, CartError]:
        """Fetch the snapshot from the catalog, then `add`."""
        match await catalog.get_product(product_id):
            case Ok(product):
                return await self.add(product, quantity, size, color)
            case Error(err):
                logger.warning("cart.catalog_lookup_failed", product_id=product_id, error=err.message)
                return Error(CartError(CartErrorKind.CATALOG, err.message))

    async def update_quantity(self, line_id: str, quantity: int) -> Result[CartState, CartError]:
        """
        Set a line's quantity. Zero or less removes the line.

        Unknown line ids are a no-op: the line may already be gone.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            return Error(CartError(
                CartErrorKind.VALIDATION, f"Quantity must be a whole number, got {quantity!r}"
            ))

        def transform(lines: Lines) -> Lines | None:
            if not any(line.id == line_id for line in lines):
                return None
            return set_quantity(lines, line_id, quantity)

        return await self._mutate(
            transform, "cart.quantity_updated", line_id=line_id, quantity=quantity
        )

    async def remove(self, line_id: str) -> Result[CartState, CartError]:
        def transform(lines: Lines) -> Lines | None:
            if not any(line.id == line_id for line in lines):
                return None
            return remove_line(lines, line_id)

        return await self._mutate(transform, "cart.item_removed", line_id=line_id)

    async def clear(self) -> Result[CartState, CartError]:
        """Empty the cart. Clearing an empty cart is a no-op."""
        async with self._lock:
            if not self._state.items:
                if self._state.stale_order_id is not None:
                    self._publish(EMPTY_CART)
                return Ok(self._state)
            return await self._commit((), "cart.cleared")

    async def mark_stale(self, order_id: str) -> CartState:
        """
        Flag the current lines as already ordered under `order_id`.

        The flag is saved with the lines when storage allows; in memory it is
        set either way.
        """
        async with self._lock:
            state = self._state
            match await self._storage.write_cart(state.items, stale_order_id=order_id):
                case Error(err):
                    logger.error("cart.stale_flag_not_saved", order_id=order_id, error=err.message)
                case Ok(_):
                    pass
            self._publish(CartState(state.items, state.summary, stale_order_id=order_id))
            logger.warning("cart.marked_stale", order_id=order_id, lines=len(state.items))
            return self._state

    # ═══════════════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════════════

    async def _mutate(
        self,
        transform: Transform,
        event: str,
        **context: object,
    ) -> Result[CartState, CartError]:
        async with self._lock:
            lines = transform(self._state.items)
            if lines is None:
                logger.debug(f"{event}.noop", **context)
                return Ok(self._state)
            return await self._commit(lines, event, **context)

    async def _commit(
        self,
        lines: Lines,
        event: str,
        **context: object,
    ) -> Result[CartState, CartError]:
        """Write, then publish. Caller holds the lock."""
        # Clearing resolves a stale cart; any other change keeps the flag.
        stale = None if not lines else self._state.stale_order_id
        result = await self._storage.write_cart(lines, stale_order_id=stale)
        match result:
            case Error(err):
                logger.error("cart.persist_failed", operation=event, error=err.message, **context)
                return Error(CartError(
                    CartErrorKind.PERSISTENCE,
                    f"Could not save your cart, please try again ({err.message})",
                ))
            case Ok(_):
                pass

        self._publish(CartState(lines, summarize(lines, self._rules), stale))
        logger.info(
            event,
            lines=len(lines),
            total=self._state.summary.total,
            **context,
        )
        return Ok(self._state)

    def _publish(self, state: CartState) -> None:
        self._state = state
        for listener in tuple(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("cart.listener_failed")


__all__ = ("CartStore", "Listener")
