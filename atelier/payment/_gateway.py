"""
Payment gateway protocol — the checkout's only view of the provider.
"""

from __future__ import annotations

from typing import Protocol

from kungfu import Result

from atelier._types import Cents
from atelier.payment._types import PaymentMethodRef, PaymentConfirmation, PaymentError


class PaymentGateway(Protocol):
    """
    Payment provider contract.

    Example (Stripe-backed implementation):

        class StripeGateway:
            async def confirm(self, method, amount, *, idempotency_key):
                try:
                    intent = await stripe.PaymentIntent.create_async(
                        amount=amount,
                        currency="usd",
                        payment_method=method.id,
                        confirm=True,
                        idempotency_key=idempotency_key,
                    )
                    return Ok(PaymentConfirmation(intent.id, method, amount))
                except stripe.CardError as e:
                    return Error(PaymentError(PaymentErrorKind.DECLINED, e.user_message, e.code))

            # ... other methods
    """

    async def collect_payment_method(self) -> Result[PaymentMethodRef, PaymentError]:
        """Run the provider's collection UI/flow and hand back a reference."""
        ...

    async def confirm(
        self,
        method: PaymentMethodRef,
        amount: Cents,
        *,
        idempotency_key: str,
    ) -> Result[PaymentConfirmation, PaymentError]:
        """
        Charge `amount` cents.

        The same idempotency key must never charge twice.
        """
        ...

    async def refund(self, confirmation: PaymentConfirmation) -> Result[None, PaymentError]:
        """Give a confirmed charge back in full."""
        ...


__all__ = ("PaymentGateway",)
