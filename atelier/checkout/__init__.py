"""
Checkout — shipping, payment, review, submit.

    from atelier import checkout as C

    flow = C.Checkout(store, gateway, orders, C.MemoryLedger())
    flow.set_shipping_address(address)
    flow.advance()
"""

from atelier.checkout._policy import CheckoutPolicy, DEFAULT_POLICY
from atelier.checkout._types import (
    CheckoutStep,
    TERMINAL_STEPS,
    new_token,
    CheckoutSession,
    CheckoutErrorKind,
    CheckoutError,
)
from atelier.checkout._ledger import (
    SubmissionState,
    Submission,
    SubmissionLedger,
    MemoryLedger,
)
from atelier.checkout._sqlalchemy import SubmissionTable, SQLAlchemyLedger
from atelier.checkout._submit import Snapshot, place_order
from atelier.checkout._machine import Checkout, Transition

__all__ = (
    "CheckoutPolicy",
    "DEFAULT_POLICY",
    "CheckoutStep",
    "TERMINAL_STEPS",
    "new_token",
    "CheckoutSession",
    "CheckoutErrorKind",
    "CheckoutError",
    "SubmissionState",
    "Submission",
    "SubmissionLedger",
    "MemoryLedger",
    "SubmissionTable",
    "SQLAlchemyLedger",
    "Snapshot",
    "place_order",
    "Checkout",
    "Transition",
)
