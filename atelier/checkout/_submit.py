"""
Order submission — charge, then store the order.

Runs as a two-step saga:

    payment  confirm(method, total, idempotency_key=token)   compensate: refund
    order    create_order(order)

If the order cannot be stored, the charge is refunded. The caller owns the
ledger and the cart clear.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta

import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error

from atelier import saga as S
from atelier._types import Clock
from atelier.cart import LineItem
from atelier.money import format_money
from atelier.orders import (
    Order,
    OrderStatus,
    OrderRepository,
    new_order_id,
    new_order_number,
)
from atelier.payment import (
    PaymentGateway,
    PaymentMethodRef,
    PaymentConfirmation,
    PaymentError,
    PaymentErrorKind,
)
from atelier.pricing import OrderSummary
from atelier.shipping import ShippingAddress, ShippingMethod
from atelier.checkout._types import CheckoutError, CheckoutErrorKind

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Everything frozen at the moment the user pressed "place order"."""

    token: str
    items: tuple[LineItem, ...]
    summary: OrderSummary
    address: ShippingAddress
    method: ShippingMethod
    payment_method: PaymentMethodRef

    @property
    def charged(self) -> OrderSummary:
        # The chosen method's price always replaces threshold shipping.
        return self.summary.with_shipping(self.method.price)


# ═══════════════════════════════════════════════════════════════════════════════
# Steps
# ═══════════════════════════════════════════════════════════════════════════════


async def confirm_payment(
    gateway: PaymentGateway,
    snapshot: Snapshot,
    timeout: timedelta,
) -> Result[PaymentConfirmation, CheckoutError]:
    amount = snapshot.charged.total

    async def bounded() -> Result[PaymentConfirmation, PaymentError]:
        async with asyncio.timeout(timeout.total_seconds()):
            return await gateway.confirm(
                snapshot.payment_method,
                amount,
                idempotency_key=snapshot.token,
            )

    def on_error(e: Exception) -> CheckoutError:
        if isinstance(e, TimeoutError):
            logger.warning(
                "checkout.payment_timeout",
                token=snapshot.token,
                timeout=timeout.total_seconds(),
            )
            return CheckoutError(
                CheckoutErrorKind.PAYMENT_TIMEOUT,
                "The payment provider did not answer in time. "
                "Retrying will not charge you twice.",
            )
        logger.warning("checkout.payment_failed", token=snapshot.token, error=str(e))
        return CheckoutError(
            CheckoutErrorKind.PAYMENT_FAILED,
            f"Payment could not be processed: {e}",
        )

    match await L.catching_async(bounded, on_error=on_error):
        case Ok(Ok(confirmation)):
            logger.info(
                "checkout.payment_confirmed",
                token=snapshot.token,
                confirmation_id=confirmation.id,
                amount=amount,
            )
            return Ok(confirmation)
        case Ok(Error(err)) if err.kind is PaymentErrorKind.DECLINED:
            logger.info("checkout.payment_declined", token=snapshot.token, code=err.decline_code)
            return Error(CheckoutError(
                CheckoutErrorKind.PAYMENT_DECLINED,
                err.message or "Your card was declined",
            ))
        case Ok(Error(err)):
            logger.warning("checkout.payment_failed", token=snapshot.token, error=err.message)
            return Error(CheckoutError(
                CheckoutErrorKind.PAYMENT_FAILED,
                f"Payment could not be processed: {err.message}",
            ))
        case Error(err):
            return Error(err)


def build_order(
    snapshot: Snapshot,
    confirmation: PaymentConfirmation,
    clock: Clock,
) -> Order:
    now = clock()
    return Order(
        id=new_order_id(),
        order_number=new_order_number(),
        status=OrderStatus.CONFIRMED,
        items=snapshot.items,
        summary=snapshot.summary,
        charged=snapshot.charged,
        shipping_address=snapshot.address,
        shipping_method=snapshot.method,
        payment_method=snapshot.payment_method,
        payment_confirmation_id=confirmation.id,
        idempotency_key=snapshot.token,
        created_at=now,
        updated_at=now,
        estimated_delivery=now + timedelta(days=snapshot.method.max_days),
    )


async def store_order(orders: OrderRepository, order: Order) -> Result[Order, CheckoutError]:
    stored = await L.catching_async(
        lambda: orders.create_order(order),
        on_error=lambda e: CheckoutError(CheckoutErrorKind.ORDER_PERSISTENCE, str(e)),
    )
    match stored:
        case Ok(Ok(_)):
            logger.info(
                "order.created",
                order_id=order.id,
                order_number=order.order_number,
                total=order.charged.total,
            )
            return Ok(order)
        case Ok(Error(err)):
            return Error(CheckoutError(CheckoutErrorKind.ORDER_PERSISTENCE, err.message))
        case Error(err):
            return Error(err)


# ═══════════════════════════════════════════════════════════════════════════════
# place_order()
# ═══════════════════════════════════════════════════════════════════════════════


async def place_order(
    snapshot: Snapshot,
    *,
    gateway: PaymentGateway,
    orders: OrderRepository,
    payment_timeout: timedelta,
    clock: Clock,
) -> Result[Order, CheckoutError]:
    """
    Charge the final total and store the order.

    On any failure nothing is left behind: no order, and no charge unless
    the refund itself failed, which the returned message says.
    """
    flow = S.step(
        "payment",
        lambda: confirm_payment(gateway, snapshot, payment_timeout),
        compensate=gateway.refund,
    ).then(lambda confirmation: S.step(
        "order",
        lambda: store_order(orders, build_order(snapshot, confirmation, clock)),
    ))

    match await S.run(flow):
        case Ok(result):
            return Ok(result.value)
        case Error(failed) if failed.step_failed == "order":
            if failed.rollback_complete:
                message = (
                    "Your order could not be saved. The charge of "
                    f"{format_money(snapshot.charged.total)} has been refunded."
                )
            else:
                logger.critical(
                    "checkout.refund_failed",
                    token=snapshot.token,
                    amount=snapshot.charged.total,
                )
                message = (
                    "Your order could not be saved and the automatic refund "
                    "failed. Please contact support."
                )
            logger.error("checkout.order_failed", token=snapshot.token, error=failed.error.message)
            return Error(CheckoutError(
                CheckoutErrorKind.ORDER_PERSISTENCE,
                message,
                charge_outstanding=not failed.rollback_complete,
            ))
        case Error(failed):
            return Error(failed.error)


__all__ = (
    "Snapshot",
    "confirm_payment",
    "build_order",
    "store_order",
    "place_order",
)
