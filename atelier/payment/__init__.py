"""
Payment — contract with the external payment provider.
"""

from atelier.payment._types import (
    PaymentMethodRef,
    PaymentConfirmation,
    PaymentErrorKind,
    PaymentError,
)
from atelier.payment._gateway import PaymentGateway

__all__ = (
    "PaymentMethodRef",
    "PaymentConfirmation",
    "PaymentErrorKind",
    "PaymentError",
    "PaymentGateway",
)
