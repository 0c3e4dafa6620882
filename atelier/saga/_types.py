"""
Saga types — steps, chains and outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Callable, Awaitable

from kungfu import LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Compensator
# ═══════════════════════════════════════════════════════════════════════════════

type Compensator[T] = Callable[[T], Awaitable[object]]
"""
Undo for a completed step. Receives the step's value.

Raising, or returning a kungfu `Error`, counts as a failed compensation.
"""

# ═══════════════════════════════════════════════════════════════════════════════
# Steps
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SagaStep[T, E]:
    """One named action, plus the compensator recorded once it succeeds."""

    name: str
    action: LazyCoroResult[T, E]
    compensate: Compensator[T] | None = None

    def then[U, E2](self, f: Callable[[T], SagaStep[U, E2]]) -> Then[T, U, E, E2]:
        return Then(self, f)


@dataclass(frozen=True, slots=True)
class Then[T, U, E, E2]:
    """Run `inner`, feed its value to `f`, run the step it returns."""

    inner: SagaStep[T, E] | Then[object, T, object, E]
    f: Callable[[T], SagaStep[U, E2]]

    def then[V, E3](self, f: Callable[[U], SagaStep[V, E3]]) -> Then[U, V, E | E2, E3]:
        return Then(self, f)  # type: ignore[arg-type]


type SagaExpr[T, E] = SagaStep[T, E] | Then[object, T, object, E]

# ═══════════════════════════════════════════════════════════════════════════════
# Outcomes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SagaResult[T]:
    value: T
    steps_executed: int
    compensators_recorded: int


@dataclass(frozen=True, slots=True)
class SagaError[E]:
    """
    Failed saga with rollback status.

    `rollback_complete` is False when any compensator failed; the caller
    must surface that, something is left half done.
    """

    error: E
    step_failed: str
    compensators_run: int
    compensators_failed: int

    @property
    def rollback_complete(self) -> bool:
        return self.compensators_failed == 0


__all__ = (
    "Compensator",
    "SagaStep",
    "Then",
    "SagaExpr",
    "SagaResult",
    "SagaError",
)
