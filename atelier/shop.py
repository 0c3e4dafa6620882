"""
Shop — wires the cart, catalog, orders and payment into one object.

    shop = await Shop.in_memory(catalog, gateway)
    await shop.store.add_from_catalog(shop.catalog, "p1", size="M")

    checkout = shop.begin_checkout()
"""

from __future__ import annotations

import structlog

from atelier._types import Clock, utcnow
from atelier.catalog import Catalog
from atelier.cart import (
    CartStore,
    CartStorage,
    MemoryCartStorage,
    SQLAlchemyCartStorage,
)
from atelier.checkout import Checkout, CheckoutStep, MemoryLedger, SQLAlchemyLedger, SubmissionLedger
from atelier.config import Settings, DEFAULT_SETTINGS
from atelier.db import create_database
from atelier.orders import OrderRepository, MemoryOrderRepository, SQLAlchemyOrderRepository
from atelier.payment import PaymentGateway

logger = structlog.get_logger(__name__)


class Shop:
    """
    One customer's cart and checkout over shared collaborators.

    At most one checkout is live at a time; beginning a new one discards
    the previous session.
    """

    def __init__(
        self,
        storage: CartStorage,
        catalog: Catalog,
        gateway: PaymentGateway,
        orders: OrderRepository,
        ledger: SubmissionLedger,
        settings: Settings = DEFAULT_SETTINGS,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self.settings = settings
        self.storage = storage
        self.catalog = catalog
        self.gateway = gateway
        self.orders = orders
        self.ledger = ledger
        self.store = CartStore(storage, settings.pricing, clock=clock)
        self._clock = clock
        self._checkout: Checkout | None = None

    @classmethod
    async def in_memory(
        cls,
        catalog: Catalog,
        gateway: PaymentGateway,
        settings: Settings = DEFAULT_SETTINGS,
        *,
        clock: Clock = utcnow,
    ) -> Shop:
        shop = cls(
            MemoryCartStorage(settings.cart_key),
            catalog,
            gateway,
            MemoryOrderRepository(clock=clock),
            MemoryLedger(clock=clock),
            settings,
            clock=clock,
        )
        await shop.store.load()
        return shop

    @classmethod
    async def with_database(
        cls,
        catalog: Catalog,
        gateway: PaymentGateway,
        settings: Settings = DEFAULT_SETTINGS,
        *,
        clock: Clock = utcnow,
    ) -> Shop:
        """Cart, orders and ledger all in `settings.database_url`."""
        session_factory, _ = await create_database(settings.database_url)
        shop = cls(
            SQLAlchemyCartStorage(session_factory, settings.cart_key),
            catalog,
            gateway,
            SQLAlchemyOrderRepository(session_factory, clock=clock),
            SQLAlchemyLedger(session_factory, clock=clock),
            settings,
            clock=clock,
        )
        await shop.store.load()
        logger.info("shop.opened", database=settings.database_url, cart_key=settings.cart_key)
        return shop

    @property
    def checkout(self) -> Checkout | None:
        return self._checkout

    def begin_checkout(self) -> Checkout:
        """Start a fresh session, or keep the live one if it has unfinished work."""
        current = self._checkout
        if current is not None and _unfinished(current):
            return current

        self._checkout = Checkout(
            self.store,
            self.gateway,
            self.orders,
            self.ledger,
            self.settings.checkout,
            clock=self._clock,
        )
        logger.info("checkout.started", token=self._checkout.session.idempotency_token)
        return self._checkout


def _unfinished(checkout: Checkout) -> bool:
    session = checkout.session
    if session.step is CheckoutStep.SUBMITTING:
        return True
    return session.awaiting_clear


__all__ = ("Shop",)
