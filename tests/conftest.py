"""
Shared fixtures and test doubles.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from kungfu import Result, Ok, Error

from atelier.cart import CartStore, MemoryCartStorage, StorageError, LineItem
from atelier.catalog import MemoryCatalog, ProductSnapshot
from atelier.checkout import Checkout, CheckoutPolicy, MemoryLedger
from atelier.orders import MemoryOrderRepository, Order, OrderError, OrderErrorKind
from atelier.payment import (
    PaymentConfirmation,
    PaymentError,
    PaymentErrorKind,
    PaymentMethodRef,
)
from atelier.shipping import ShippingAddress

FIXED_NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Result helpers
# ═══════════════════════════════════════════════════════════════════════════════


def ok[T](result: Result[T, Any]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(err):
            pytest.fail(f"expected Ok, got Error({err!r})")


def err[E](result: Result[Any, E]) -> E:
    match result:
        case Error(e):
            return e
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")


# ═══════════════════════════════════════════════════════════════════════════════
# Doubles
# ═══════════════════════════════════════════════════════════════════════════════


class FixedClock:
    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


class FlakyStorage(MemoryCartStorage):
    """Memory storage whose writes fail while `failing` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.failing = False
        self.failed_writes = 0

    async def write_cart(
        self,
        items: tuple[LineItem, ...],
        *,
        stale_order_id: str | None = None,
    ) -> Result[None, StorageError]:
        if self.failing:
            self.failed_writes += 1
            return Error(StorageError("disk full"))
        return await super().write_cart(items, stale_order_id=stale_order_id)


class ScriptedGateway:
    """
    Payment provider double.

    outcome: "approve" | "decline" | "error" | "raise"
    Confirmations are deduplicated by idempotency key, like a real provider.
    """

    def __init__(self) -> None:
        self.outcome = "approve"
        self.delay = 0.0
        self.refund_fails = False
        self.method = PaymentMethodRef("pm_card_visa", "Visa •••• 4242")
        self.collect_fails = False
        self.calls = 0
        self.charges: list[PaymentConfirmation] = []
        self.refunds: list[PaymentConfirmation] = []
        self._by_key: dict[str, PaymentConfirmation] = {}

    async def collect_payment_method(self) -> Result[PaymentMethodRef, PaymentError]:
        if self.collect_fails:
            return Error(PaymentError(PaymentErrorKind.ERROR, "Payment sheet was closed"))
        return Ok(self.method)

    async def confirm(
        self,
        method: PaymentMethodRef,
        amount: int,
        *,
        idempotency_key: str,
    ) -> Result[PaymentConfirmation, PaymentError]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if idempotency_key in self._by_key:
            return Ok(self._by_key[idempotency_key])

        match self.outcome:
            case "decline":
                return Error(PaymentError(
                    PaymentErrorKind.DECLINED, "Your card was declined", "card_declined"
                ))
            case "error":
                return Error(PaymentError(PaymentErrorKind.ERROR, "network unreachable"))
            case "raise":
                raise ConnectionError("socket closed")

        confirmation = PaymentConfirmation(f"pi_{len(self.charges) + 1}", method, amount)
        self.charges.append(confirmation)
        self._by_key[idempotency_key] = confirmation
        return Ok(confirmation)

    async def refund(self, confirmation: PaymentConfirmation) -> Result[None, PaymentError]:
        if self.refund_fails:
            return Error(PaymentError(PaymentErrorKind.ERROR, "refund rejected"))
        self.refunds.append(confirmation)
        return Ok(None)


class FlakyOrders(MemoryOrderRepository):
    """Order repository whose inserts fail while `failing` is set."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.failing = False

    async def create_order(self, order: Order) -> Result[None, OrderError]:
        if self.failing:
            return Error(OrderError(OrderErrorKind.PERSISTENCE, "database unavailable"))
        return await super().create_order(order)


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════

PRODUCT_ROWS: list[dict[str, Any]] = [
    {
        "id": "p1",
        "name": "Linen Shirt",
        "price": "50.00",
        "brand": {"id": "b1", "name": "Maison Lune"},
        "images": ["https://cdn.example.com/p1.jpg"],
        "sizes": ["S", "M", "L"],
        "colors": ["white", "navy"],
        "stock_quantity": 12,
    },
    {
        "id": "p2",
        "name": "Wool Coat",
        "price": "200.00",
        "brand_id": "b2",
        "stock_quantity": 3,
    },
    {
        "id": "p3",
        "name": "Silk Scarf",
        "price": 99.99,
        "brand_id": "b1",
    },
]


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def shirt() -> ProductSnapshot:
    return ProductSnapshot(
        id="p1",
        name="Linen Shirt",
        unit_price=5000,
        brand="Maison Lune",
        image="https://cdn.example.com/p1.jpg",
        stock_quantity=12,
        sizes=("S", "M", "L"),
        colors=("white", "navy"),
    )


@pytest.fixture
def coat() -> ProductSnapshot:
    return ProductSnapshot(id="p2", name="Wool Coat", unit_price=20000, brand="b2", stock_quantity=3)


@pytest.fixture
def catalog() -> MemoryCatalog:
    return MemoryCatalog(PRODUCT_ROWS)


@pytest.fixture
def storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture
def store(storage: FlakyStorage, clock: FixedClock) -> CartStore:
    return CartStore(storage, clock=clock)


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def orders(clock: FixedClock) -> FlakyOrders:
    return FlakyOrders(clock=clock)


@pytest.fixture
def ledger(clock: FixedClock) -> MemoryLedger:
    return MemoryLedger(clock=clock)


@pytest.fixture
def policy() -> CheckoutPolicy:
    return CheckoutPolicy().with_payment_timeout(seconds=0.2)


@pytest.fixture
def checkout(
    store: CartStore,
    gateway: ScriptedGateway,
    orders: FlakyOrders,
    ledger: MemoryLedger,
    policy: CheckoutPolicy,
    clock: FixedClock,
) -> Checkout:
    return Checkout(store, gateway, orders, ledger, policy, clock=clock)


@pytest.fixture
def address() -> ShippingAddress:
    return ShippingAddress(
        first_name="Ada",
        last_name="Lovelace",
        address1="12 St James's Square",
        city="Portland",
        state="OR",
        postal_code="97201",
        phone="+1 503 555 0100",
    )
