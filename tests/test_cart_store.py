import asyncio
from dataclasses import replace

from atelier.cart import CartErrorKind, CartState, CartStore, EMPTY_CART
from atelier.catalog import MemoryCatalog, ProductSnapshot
from atelier.pricing import PricingRules

from conftest import FlakyStorage, FixedClock, err, ok


class TestAdd:
    async def test_same_key_merges_at_first_price(
        self, store: CartStore, shirt: ProductSnapshot
    ) -> None:
        ok(await store.add(shirt, 1, "M"))
        state = ok(await store.add(replace(shirt, unit_price=7500), 2, "M"))

        assert len(state.items) == 1
        assert state.items[0].quantity == 3
        assert state.items[0].unit_price == 5000
        assert state.summary.subtotal == 15000

    async def test_summary_matches_items(
        self, store: CartStore, shirt: ProductSnapshot, coat: ProductSnapshot
    ) -> None:
        ok(await store.add(shirt, 1, "S"))
        state = ok(await store.add(coat))

        assert state.summary.subtotal == 25000
        assert state.summary.tax == 2000
        assert state.summary.shipping == 0
        assert state.summary.total == 27000
        assert store.get_state() == state

    async def test_validation_touches_nothing(
        self, store: CartStore, storage: FlakyStorage, shirt: ProductSnapshot
    ) -> None:
        error = err(await store.add(shirt, 0, "M"))

        assert error.kind is CartErrorKind.VALIDATION
        assert storage.writes == 0
        assert store.get_state() == EMPTY_CART

    async def test_add_from_catalog(self, store: CartStore, catalog: MemoryCatalog) -> None:
        state = ok(await store.add_from_catalog(catalog, "p1", 2, "M", "white"))

        assert state.items[0].product.name == "Linen Shirt"
        assert state.items[0].unit_price == 5000

    async def test_add_from_catalog_unknown_product(
        self, store: CartStore, catalog: MemoryCatalog
    ) -> None:
        assert err(await store.add_from_catalog(catalog, "missing")).kind is CartErrorKind.CATALOG

    async def test_custom_rules(self, storage: FlakyStorage, clock: FixedClock, coat: ProductSnapshot) -> None:
        store = CartStore(storage, PricingRules().with_free_shipping_threshold(50000), clock=clock)

        state = ok(await store.add(coat))

        assert state.summary.shipping == 999


class TestUpdateAndRemove:
    async def test_update_quantity(self, store: CartStore, shirt: ProductSnapshot) -> None:
        line = ok(await store.add(shirt, 1, "M")).items[0]

        state = ok(await store.update_quantity(line.id, 4))

        assert state.items[0].quantity == 4
        assert state.items[0].unit_price == 5000
        assert state.summary.item_count == 4

    async def test_zero_quantity_removes(self, store: CartStore, shirt: ProductSnapshot) -> None:
        line = ok(await store.add(shirt, 2, "M")).items[0]

        state = ok(await store.update_quantity(line.id, 0))

        assert state.items == ()
        assert state.summary.shipping == 0

    async def test_unknown_line_is_noop(
        self, store: CartStore, storage: FlakyStorage, shirt: ProductSnapshot
    ) -> None:
        before = ok(await store.add(shirt, 1, "M"))
        writes = storage.writes

        assert ok(await store.update_quantity("gone", 3)) == before
        assert ok(await store.remove("gone")) == before
        assert storage.writes == writes

    async def test_remove(self, store: CartStore, shirt: ProductSnapshot, coat: ProductSnapshot) -> None:
        ok(await store.add(shirt, 1, "M"))
        coat_line = ok(await store.add(coat)).items[1]

        state = ok(await store.remove(coat_line.id))

        assert [line.product.id for line in state.items] == ["p1"]


class TestClear:
    async def test_clear_is_idempotent(
        self, store: CartStore, storage: FlakyStorage, shirt: ProductSnapshot
    ) -> None:
        ok(await store.add(shirt, 1, "M"))

        assert ok(await store.clear()) == EMPTY_CART
        writes = storage.writes
        assert ok(await store.clear()) == EMPTY_CART
        assert storage.writes == writes

    async def test_clear_resets_stale_flag(self, store: CartStore, shirt: ProductSnapshot) -> None:
        ok(await store.add(shirt, 1, "M"))
        await store.mark_stale("order-1")
        assert store.get_state().stale_order_id == "order-1"

        ok(await store.add(shirt, 1, "M"))
        assert store.get_state().stale_order_id == "order-1"

        assert ok(await store.clear()).stale_order_id is None


class TestPersistence:
    async def test_write_failure_keeps_previous_state(
        self, store: CartStore, storage: FlakyStorage, shirt: ProductSnapshot
    ) -> None:
        before = ok(await store.add(shirt, 1, "M"))
        storage.failing = True

        error = err(await store.add(shirt, 5, "M"))

        assert error.kind is CartErrorKind.PERSISTENCE
        assert store.get_state() == before
        assert err(await store.clear()).kind is CartErrorKind.PERSISTENCE
        assert store.get_state() == before

    async def test_load_restores_written_lines(
        self, storage: FlakyStorage, clock: FixedClock, shirt: ProductSnapshot
    ) -> None:
        written = ok(await CartStore(storage, clock=clock).add(shirt, 2, "L"))

        loaded = await CartStore(storage, clock=clock).load()

        assert loaded.items == written.items
        assert loaded.summary == written.summary

    async def test_stale_flag_survives_restart(
        self, storage: FlakyStorage, clock: FixedClock, shirt: ProductSnapshot
    ) -> None:
        store = CartStore(storage, clock=clock)
        ok(await store.add(shirt, 1, "M"))
        await store.mark_stale("order-1")

        restarted = await CartStore(storage, clock=clock).load()

        assert restarted.stale_order_id == "order-1"
        assert len(restarted.items) == 1

        ok(await store.clear())
        assert (await CartStore(storage, clock=clock).load()).stale_order_id is None

    async def test_load_degrades_to_empty(self, storage: FlakyStorage, clock: FixedClock) -> None:
        storage.values[storage.key] = "not a cart"

        assert await CartStore(storage, clock=clock).load() == EMPTY_CART


class TestSerialization:
    async def test_concurrent_adds_are_not_lost(self, store: CartStore, shirt: ProductSnapshot) -> None:
        await asyncio.gather(*(store.add(shirt, 1, "M") for _ in range(20)))

        state = store.get_state()
        assert len(state.items) == 1
        assert state.items[0].quantity == 20

    async def test_add_then_remove_in_issue_order(self, store: CartStore, shirt: ProductSnapshot) -> None:
        line = ok(await store.add(shirt, 1, "M")).items[0]

        await asyncio.gather(store.add(shirt, 1, "M"), store.remove(line.id))

        assert store.get_state().items == ()


class TestSubscribe:
    async def test_listener_sees_every_commit(self, store: CartStore, shirt: ProductSnapshot) -> None:
        seen: list[CartState] = []
        unsubscribe = store.subscribe(seen.append)

        ok(await store.add(shirt, 1, "M"))
        ok(await store.add(shirt, 1, "M"))
        unsubscribe()
        ok(await store.clear())

        assert [s.summary.item_count for s in seen] == [1, 2]

    async def test_failing_listener_does_not_break_store(
        self, store: CartStore, shirt: ProductSnapshot
    ) -> None:
        def boom(state: CartState) -> None:
            raise RuntimeError("render failed")

        store.subscribe(boom)

        assert ok(await store.add(shirt, 1, "M")).summary.item_count == 1

    async def test_failed_write_publishes_nothing(
        self, store: CartStore, storage: FlakyStorage, shirt: ProductSnapshot
    ) -> None:
        seen: list[CartState] = []
        store.subscribe(seen.append)
        storage.failing = True

        err(await store.add(shirt, 1, "M"))

        assert seen == []
