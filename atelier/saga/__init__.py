"""
Saga — multi-step operations with compensation.

    from atelier import saga as S

    flow = S.step("charge", charge, refund).then(lambda c: S.step("order", place(c)))
    result = await S.run(flow)
"""

from __future__ import annotations

from atelier.saga._types import (
    Compensator,
    SagaStep,
    Then,
    SagaExpr,
    SagaResult,
    SagaError,
)
from atelier.saga._step import step, from_async
from atelier.saga._run import run, run_compensators

__all__ = (
    "Compensator",
    "SagaStep",
    "Then",
    "SagaExpr",
    "SagaResult",
    "SagaError",
    "step",
    "from_async",
    "run",
    "run_compensators",
)
