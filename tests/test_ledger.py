from datetime import timedelta

from atelier.checkout import MemoryLedger, SQLAlchemyLedger, SubmissionState
from atelier.db import create_database

from conftest import FixedClock, err, ok

TTL = timedelta(hours=1)


async def exercise(ledger, clock: FixedClock) -> None:
    assert ok(await ledger.get("t1")) is None

    assert ok(await ledger.begin("t1", TTL)) is True
    assert ok(await ledger.begin("t1", TTL)) is False
    assert ok(await ledger.get("t1")).state is SubmissionState.PENDING

    ok(await ledger.complete("t1", "order-1", TTL))
    record = ok(await ledger.get("t1"))
    assert record.state is SubmissionState.COMPLETED
    assert record.order_id == "order-1"
    assert ok(await ledger.begin("t1", TTL)) is False

    clock.advance(hours=2)
    assert ok(await ledger.get("t1")) is None
    assert ok(await ledger.begin("t1", TTL)) is True

    assert ok(await ledger.release("t1")) is True
    assert ok(await ledger.release("t1")) is False
    err(await ledger.complete("never-begun", "order-2", TTL))


class TestMemoryLedger:
    async def test_lifecycle(self, clock: FixedClock) -> None:
        await exercise(MemoryLedger(clock=clock), clock)


class TestSQLAlchemyLedger:
    async def test_lifecycle(self, clock: FixedClock) -> None:
        session_factory, engine = await create_database()
        try:
            await exercise(SQLAlchemyLedger(session_factory, clock=clock), clock)
        finally:
            await engine.dispose()
