import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from atelier import Settings, Shop
from atelier.catalog import MemoryCatalog
from atelier.checkout import CheckoutPolicy, CheckoutStep
from atelier.pricing import PricingRules
from atelier.shipping import EXPRESS, STANDARD

from conftest import FixedClock, ScriptedGateway, ok


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.pricing.tax_rate == Decimal("0.08")
        assert settings.checkout.payment_timeout == timedelta(seconds=30)
        assert settings.checkout.default_method is STANDARD

    def test_builders_return_new_settings(self) -> None:
        base = Settings()
        tuned = (
            base
            .with_pricing(PricingRules().with_tax_rate("0.0725"))
            .with_checkout(CheckoutPolicy().with_clear_attempts(3))
            .with_cart_key("guest-42")
        )

        assert tuned.pricing.tax_rate == Decimal("0.0725")
        assert tuned.checkout.clear_attempts == 3
        assert tuned.cart_key == "guest-42"
        assert base.cart_key != "guest-42"

    @pytest.mark.parametrize(
        "build",
        [
            lambda: Settings().with_cart_key(""),
            lambda: CheckoutPolicy().with_payment_timeout(seconds=0),
            lambda: CheckoutPolicy().with_clear_attempts(0),
            lambda: CheckoutPolicy().with_shipping_methods(),
            lambda: CheckoutPolicy().with_ledger_ttl(hours=-1),
        ],
    )
    def test_invalid_values_rejected(self, build) -> None:
        with pytest.raises(ValueError):
            build()

    def test_policy_method_lookup(self) -> None:
        policy = CheckoutPolicy().with_shipping_methods(EXPRESS)

        assert policy.method("express") is EXPRESS
        assert policy.method("standard") is None
        assert policy.default_method is EXPRESS


class TestShop:
    async def test_in_memory_round(
        self, catalog: MemoryCatalog, gateway: ScriptedGateway, clock: FixedClock, address
    ) -> None:
        shop = await Shop.in_memory(catalog, gateway, clock=clock)
        ok(await shop.store.add_from_catalog(shop.catalog, "p1", size="M"))

        checkout = shop.begin_checkout()
        ok(checkout.set_shipping_address(address))
        ok(checkout.advance())
        ok(await checkout.collect_payment())
        ok(checkout.advance())
        session = ok(await checkout.submit())

        assert session.step is CheckoutStep.DONE
        assert ok(await shop.orders.get(session.order.id)) == session.order
        assert shop.store.get_state().items == ()

    async def test_begin_replaces_idle_checkout(
        self, catalog: MemoryCatalog, gateway: ScriptedGateway, clock: FixedClock
    ) -> None:
        shop = await Shop.in_memory(catalog, gateway, clock=clock)

        first = shop.begin_checkout()
        second = shop.begin_checkout()

        assert first is not second
        assert shop.checkout is second
        assert first.session.idempotency_token != second.session.idempotency_token

    async def test_begin_keeps_submitting_checkout(
        self, catalog: MemoryCatalog, gateway: ScriptedGateway, clock: FixedClock, address
    ) -> None:
        shop = await Shop.in_memory(catalog, gateway, clock=clock)
        ok(await shop.store.add_from_catalog(shop.catalog, "p2"))
        checkout = shop.begin_checkout()
        ok(checkout.set_shipping_address(address))
        ok(checkout.advance())
        ok(await checkout.collect_payment())
        ok(checkout.advance())

        gateway.delay = 0.05
        pending = asyncio.ensure_future(checkout.submit())
        await asyncio.sleep(0.01)

        assert checkout.step is CheckoutStep.SUBMITTING
        assert shop.begin_checkout() is checkout
        assert ok(await pending).step is CheckoutStep.DONE

    async def test_with_database(
        self, catalog: MemoryCatalog, gateway: ScriptedGateway, clock: FixedClock
    ) -> None:
        shop = await Shop.with_database(catalog, gateway, clock=clock)

        ok(await shop.store.add_from_catalog(shop.catalog, "p1", 2, size="S"))
        ok(await shop.store.add_from_catalog(shop.catalog, "p3"))

        state = shop.store.get_state()
        assert [line.product.id for line in state.items] == ["p1", "p3"]
        assert state.summary.subtotal == 10000 + 9999

        loaded = ok(await shop.storage.read_cart())
        assert [line.quantity for line in loaded] == [2, 1]
