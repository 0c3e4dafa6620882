"""
Saga step constructors.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable

from combinators import lift as L
from kungfu import Result, LazyCoroResult

from atelier.saga._types import SagaStep, Compensator


def step[T, E](
    name: str,
    action: Callable[[], Awaitable[Result[T, E]]],
    compensate: Compensator[T] | None = None,
) -> SagaStep[T, E]:
    """
    Step from an async callable that already returns a Result.

    Example:
        S.step(
            "payment",
            lambda: gateway.confirm(method, amount, idempotency_key=key),
            compensate=gateway.refund,
        )
    """
    return SagaStep(name=name, action=LazyCoroResult(action), compensate=compensate)


def from_async[T, E](
    name: str,
    action: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], E],
    compensate: Compensator[T] | None = None,
) -> SagaStep[T, E]:
    """Step from a plain async callable; exceptions become `on_error(exc)`."""
    return SagaStep(
        name=name,
        action=L.catching_async(action, on_error=on_error),
        compensate=compensate,
    )


__all__ = ("step", "from_async")
