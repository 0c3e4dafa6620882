"""
Payment types — what the checkout gets back from the payment provider.

No card data ever reaches atelier: only an opaque method reference and the
provider's confirmation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from atelier._types import Cents


@dataclass(frozen=True, slots=True)
class PaymentMethodRef:
    """
    Opaque reference produced by the provider (e.g. "pm_1Nx...").

    `label` is display-only ("visa •••• 4242").
    """

    id: str
    label: str | None = None


@dataclass(frozen=True, slots=True)
class PaymentConfirmation:
    """A confirmed charge."""

    id: str
    method: PaymentMethodRef
    amount: Cents
    currency: str = "usd"


class PaymentErrorKind(Enum):
    DECLINED = auto()  # Provider said no
    ERROR = auto()  # Network, provider outage, unknown failure


@dataclass(frozen=True, slots=True)
class PaymentError:
    kind: PaymentErrorKind
    message: str
    decline_code: str | None = None


__all__ = (
    "PaymentMethodRef",
    "PaymentConfirmation",
    "PaymentErrorKind",
    "PaymentError",
)
