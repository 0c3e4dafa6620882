"""
Checkout types — session, steps and errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from uuid import uuid4

from atelier.shipping import ShippingAddress, ShippingMethod
from atelier.payment import PaymentMethodRef
from atelier.orders import Order


# ═══════════════════════════════════════════════════════════════════════════════
# Steps
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutStep(Enum):
    """
    Lifecycle:
        SHIPPING ⇄ PAYMENT ⇄ REVIEW → SUBMITTING → DONE
                                    ↘ (failure) REVIEW
        REVIEW with an order placed only moves forward, to DONE
        any of SHIPPING | PAYMENT | REVIEW → CANCELLED
    """

    SHIPPING = "shipping"
    PAYMENT = "payment"
    REVIEW = "review"
    SUBMITTING = "submitting"
    DONE = "done"
    CANCELLED = "cancelled"


TERMINAL_STEPS = frozenset({CheckoutStep.DONE, CheckoutStep.CANCELLED})


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


def new_token() -> str:
    return uuid4().hex


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """
    Inputs gathered so far. Ephemeral, never persisted.

    `idempotency_token` identifies this submission across retries: the same
    session never produces two orders or two charges.
    """

    step: CheckoutStep = CheckoutStep.SHIPPING
    shipping_address: ShippingAddress | None = None
    shipping_method: ShippingMethod | None = None
    payment_method: PaymentMethodRef | None = None
    idempotency_token: str = field(default_factory=new_token)
    order: Order | None = None

    @property
    def is_terminal(self) -> bool:
        return self.step in TERMINAL_STEPS

    @property
    def awaiting_clear(self) -> bool:
        """Order placed, but the cart still has to be emptied before DONE."""
        return self.order is not None and not self.is_terminal


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutErrorKind(Enum):
    VALIDATION = auto()
    INVALID_TRANSITION = auto()
    EMPTY_CART = auto()
    PAYMENT_DECLINED = auto()
    PAYMENT_FAILED = auto()
    PAYMENT_TIMEOUT = auto()
    ORDER_PERSISTENCE = auto()
    SUBMISSION_IN_PROGRESS = auto()
    CART_CLEAR_FAILED = auto()  # Order exists, cart is flagged stale
    STALE_CART = auto()  # Cart was already ordered from, clear it first
    LEDGER = auto()


@dataclass(frozen=True, slots=True)
class CheckoutError:
    """
    Rejected transition or failed submission.

    `fields` names the offending inputs for VALIDATION errors.
    `order` is set when an order was created despite the error.
    `charge_outstanding` is set when the customer was charged but neither an
    order nor a refund followed.
    """

    kind: CheckoutErrorKind
    message: str
    fields: tuple[str, ...] = ()
    order: Order | None = None
    charge_outstanding: bool = False


__all__ = (
    "CheckoutStep",
    "TERMINAL_STEPS",
    "new_token",
    "CheckoutSession",
    "CheckoutErrorKind",
    "CheckoutError",
)
