"""
Saga execution with reverse-order rollback.
"""

from __future__ import annotations

import structlog
from kungfu import Result, Ok, Error

from atelier.saga._types import SagaStep, Then, SagaExpr, SagaResult, SagaError, Compensator

logger = structlog.get_logger(__name__)

type Recorded = tuple[str, object, Compensator[object]]


class _StepFailed[E](Exception):
    def __init__(self, step: str, error: E) -> None:
        super().__init__(step)
        self.step = step
        self.error = error


# ═══════════════════════════════════════════════════════════════════════════════
# Steps
# ═══════════════════════════════════════════════════════════════════════════════


async def _run_expr(expr: SagaExpr[object, object], recorded: list[Recorded]) -> object:
    match expr:
        case SagaStep(name=name, action=action, compensate=compensate):
            match await action:
                case Ok(value):
                    if compensate is not None:
                        recorded.append((name, value, compensate))
                    return value
                case Error(e):
                    raise _StepFailed(name, e)
        case Then(inner=inner, f=f):
            value = await _run_expr(inner, recorded)
            return await _run_expr(f(value), recorded)
    raise TypeError(f"Not a saga expression: {expr!r}")


async def run_compensators(recorded: list[Recorded]) -> tuple[int, int]:
    """Run compensators newest first. Returns (run, failed)."""
    run_count = 0
    failed = 0

    for name, value, compensate in reversed(recorded):
        try:
            outcome = await compensate(value)
        except Exception:
            logger.exception("saga.compensation_raised", step=name)
            failed += 1
            continue

        match outcome:
            case Error(e):
                logger.error("saga.compensation_failed", step=name, error=str(e))
                failed += 1
            case _:
                logger.info("saga.compensated", step=name)
                run_count += 1

    return run_count, failed


# ═══════════════════════════════════════════════════════════════════════════════
# run()
# ═══════════════════════════════════════════════════════════════════════════════


async def run[T, E](saga: SagaExpr[T, E]) -> Result[SagaResult[T], SagaError[E]]:
    """
    Execute a step or chain. On the first failing step, compensators of the
    steps that already succeeded run in reverse order.

    Example:
        from atelier import saga as S

        charge = S.step("charge", confirm_payment, compensate=refund)
        result = await S.run(charge.then(lambda c: S.step("order", persist(c))))

        match result:
            case Ok(r):
                print(r.value)
            case Error(e):
                print(e.step_failed, e.rollback_complete)
    """
    recorded: list[Recorded] = []

    try:
        value = await _run_expr(saga, recorded)  # type: ignore[arg-type]
    except _StepFailed as failure:
        logger.warning(
            "saga.step_failed",
            step=failure.step,
            to_compensate=len(recorded),
        )
        comp_run, comp_failed = await run_compensators(recorded)
        return Error(SagaError(
            error=failure.error,
            step_failed=failure.step,
            compensators_run=comp_run,
            compensators_failed=comp_failed,
        ))

    return Ok(SagaResult(
        value=value,  # type: ignore[arg-type]
        steps_executed=_count(saga),
        compensators_recorded=len(recorded),
    ))


def _count(expr: SagaExpr[object, object]) -> int:
    match expr:
        case Then(inner=inner):
            return _count(inner) + 1
        case _:
            return 1


__all__ = ("run", "run_compensators")
