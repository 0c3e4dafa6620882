"""
Checkout state machine.

    SHIPPING ──advance──▶ PAYMENT ──advance──▶ REVIEW ──submit──▶ DONE
        ◀──────back───────    ◀──────back───────

Every transition returns Result[CheckoutSession, CheckoutError]; a rejected
transition leaves the session exactly as it was.
"""

from __future__ import annotations

from dataclasses import replace

import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error

from atelier._types import Clock, utcnow
from atelier.cart import CartStore
from atelier.orders import Order, OrderRepository
from atelier.payment import PaymentGateway, PaymentMethodRef, PaymentErrorKind
from atelier.pricing import OrderSummary
from atelier.shipping import ShippingAddress, missing_fields, describe_missing
from atelier.checkout._policy import CheckoutPolicy, DEFAULT_POLICY
from atelier.checkout._types import (
    CheckoutStep,
    CheckoutSession,
    CheckoutError,
    CheckoutErrorKind,
    new_token,
)
from atelier.checkout._ledger import SubmissionLedger, SubmissionState
from atelier.checkout._submit import Snapshot, place_order

logger = structlog.get_logger(__name__)

type Transition = Result[CheckoutSession, CheckoutError]


def _rejected(message: str) -> Transition:
    return Error(CheckoutError(CheckoutErrorKind.INVALID_TRANSITION, message))


def _settled(error: CheckoutError) -> bool:
    """True when the attempt ended with no charge standing: a retry is a new payment."""
    match error.kind:
        case CheckoutErrorKind.PAYMENT_DECLINED:
            return True
        case CheckoutErrorKind.ORDER_PERSISTENCE:
            return not error.charge_outstanding
        case _:
            return False


class Checkout:
    """
    One checkout attempt over a live cart.

    Example:
        checkout = Checkout(store, gateway, orders, ledger)

        checkout.set_shipping_address(address)
        checkout.advance()                      # → PAYMENT, standard shipping
        await checkout.collect_payment()
        checkout.advance()                      # → REVIEW

        match await checkout.submit():
            case Ok(session):
                print(session.order.order_number)
            case Error(e):
                print(e.message)                # still in REVIEW
    """

    def __init__(
        self,
        store: CartStore,
        gateway: PaymentGateway,
        orders: OrderRepository,
        ledger: SubmissionLedger,
        policy: CheckoutPolicy = DEFAULT_POLICY,
        *,
        session: CheckoutSession | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._orders = orders
        self._ledger = ledger
        self._policy = policy
        self._clock = clock
        self._session = session if session is not None else CheckoutSession()

    @property
    def session(self) -> CheckoutSession:
        return self._session

    @property
    def step(self) -> CheckoutStep:
        return self._session.step

    def review_summary(self) -> OrderSummary:
        """What submit would charge right now."""
        summary = self._store.get_state().summary
        method = self._session.shipping_method or self._policy.default_method
        return summary.with_shipping(method.price)

    # ═══════════════════════════════════════════════════════════════════════
    # Inputs
    # ═══════════════════════════════════════════════════════════════════════

    def set_shipping_address(self, address: ShippingAddress) -> Transition:
        """Store the address. Completeness is checked on `advance`."""
        if (guard := self._require(CheckoutStep.SHIPPING, "change the address")) is not None:
            return guard
        return Ok(self._update(shipping_address=address))

    def select_shipping_method(self, method_id: str) -> Transition:
        if (guard := self._require(CheckoutStep.SHIPPING, "change shipping")) is not None:
            return guard
        method = self._policy.method(method_id)
        if method is None:
            return Error(CheckoutError(
                CheckoutErrorKind.VALIDATION,
                f"Unknown shipping method {method_id!r}",
                fields=("shipping_method",),
            ))
        logger.debug("checkout.shipping_method_selected", method=method.id)
        return Ok(self._update(shipping_method=method))

    def set_payment_method(self, method: PaymentMethodRef) -> Transition:
        if (guard := self._require(CheckoutStep.PAYMENT, "change payment")) is not None:
            return guard
        if not method.id.strip():
            return Error(CheckoutError(
                CheckoutErrorKind.VALIDATION,
                "missing payment method",
                fields=("payment_method",),
            ))
        return Ok(self._update(payment_method=method))

    async def collect_payment(self) -> Transition:
        """Ask the payment provider for a method reference."""
        if (guard := self._require(CheckoutStep.PAYMENT, "change payment")) is not None:
            return guard

        collected = await L.catching_async(
            self._gateway.collect_payment_method,
            on_error=lambda e: CheckoutError(
                CheckoutErrorKind.PAYMENT_FAILED,
                f"Could not set up payment: {e}",
            ),
        )
        match collected:
            case Ok(Ok(method)):
                return self.set_payment_method(method)
            case Ok(Error(err)):
                kind = (
                    CheckoutErrorKind.PAYMENT_DECLINED
                    if err.kind is PaymentErrorKind.DECLINED
                    else CheckoutErrorKind.PAYMENT_FAILED
                )
                logger.info("checkout.payment_collection_failed", error=err.message)
                return Error(CheckoutError(kind, err.message))
            case Error(err):
                logger.warning("checkout.payment_collection_failed", error=err.message)
                return Error(err)

    # ═══════════════════════════════════════════════════════════════════════
    # Transitions
    # ═══════════════════════════════════════════════════════════════════════

    def advance(self) -> Transition:
        """Forward one step, if the current step's inputs are valid."""
        session = self._session
        match session.step:
            case CheckoutStep.SHIPPING:
                missing = missing_fields(session.shipping_address)
                if missing:
                    return Error(CheckoutError(
                        CheckoutErrorKind.VALIDATION,
                        describe_missing(missing),
                        fields=missing,
                    ))
                method = session.shipping_method or self._policy.default_method
                return Ok(self._move(CheckoutStep.PAYMENT, shipping_method=method))

            case CheckoutStep.PAYMENT:
                if session.payment_method is None or not session.payment_method.id.strip():
                    return Error(CheckoutError(
                        CheckoutErrorKind.VALIDATION,
                        "missing payment method",
                        fields=("payment_method",),
                    ))
                return Ok(self._move(CheckoutStep.REVIEW))

            case CheckoutStep.REVIEW:
                return _rejected("Review is the last step, submit to place the order")

            case CheckoutStep.SUBMITTING:
                return Error(CheckoutError(
                    CheckoutErrorKind.SUBMISSION_IN_PROGRESS,
                    "Your order is being placed",
                ))

            case _:
                return _rejected(f"Checkout is {session.step.value}")

    def back(self) -> Transition:
        if (guard := self._order_placed()) is not None:
            return guard
        match self._session.step:
            case CheckoutStep.PAYMENT:
                return Ok(self._move(CheckoutStep.SHIPPING))
            case CheckoutStep.REVIEW:
                return Ok(self._move(CheckoutStep.PAYMENT))
            case step:
                return _rejected(f"Cannot go back from {step.value}")

    def cancel(self) -> Transition:
        """Discard the session. The cart is not touched."""
        match self._session.step:
            case CheckoutStep.SUBMITTING:
                return Error(CheckoutError(
                    CheckoutErrorKind.SUBMISSION_IN_PROGRESS,
                    "Your order is being placed and can no longer be cancelled",
                ))
            case CheckoutStep.DONE | CheckoutStep.CANCELLED:
                return _rejected(f"Checkout is {self._session.step.value}")
            case _:
                if (guard := self._order_placed()) is not None:
                    return guard
                return Ok(self._move(CheckoutStep.CANCELLED))

    async def submit(self) -> Transition:
        """
        Place the order.

        On failure the session stays in REVIEW with an error for the user.
        Retrying is safe: the session token makes the charge and the order
        happen at most once.
        """
        session = self._session
        if session.step is CheckoutStep.SUBMITTING:
            return Error(CheckoutError(
                CheckoutErrorKind.SUBMISSION_IN_PROGRESS,
                "Your order is being placed",
            ))
        if (guard := self._require(CheckoutStep.REVIEW, "place the order")) is not None:
            return guard

        # Order already placed, only the cart clear is outstanding.
        if session.order is not None:
            return await self._finish(session.order)

        token = session.idempotency_token
        match await self._resume(token):
            case Error(err):
                return Error(err)
            case Ok(Order() as order):
                return await self._finish(order)
            case Ok(None):
                pass

        cart = self._store.get_state()
        if cart.is_empty:
            return Error(CheckoutError(CheckoutErrorKind.EMPTY_CART, "Your cart is empty"))
        if cart.stale_order_id is not None:
            logger.warning("checkout.stale_cart", token=token, order_id=cart.stale_order_id)
            return Error(CheckoutError(
                CheckoutErrorKind.STALE_CART,
                f"Order {cart.stale_order_id} was already placed from this cart. "
                "Clear the cart to start a new order.",
            ))

        # Guarded by advance(); a restored session may still lack them.
        if session.shipping_address is None or session.payment_method is None:
            return _rejected("Checkout is missing shipping or payment details")

        match await self._ledger.begin(token, self._policy.ledger_ttl):
            case Error(err):
                return Error(CheckoutError(CheckoutErrorKind.LEDGER, err.message))
            case Ok(False):
                return Error(CheckoutError(
                    CheckoutErrorKind.SUBMISSION_IN_PROGRESS,
                    "Your order is being placed",
                ))
            case Ok(True):
                pass

        snapshot = Snapshot(
            token=token,
            items=cart.items,
            summary=cart.summary,
            address=session.shipping_address,
            method=session.shipping_method or self._policy.default_method,
            payment_method=session.payment_method,
        )
        self._move(CheckoutStep.SUBMITTING)

        try:
            placed = await place_order(
                snapshot,
                gateway=self._gateway,
                orders=self._orders,
                payment_timeout=self._policy.payment_timeout,
                clock=self._clock,
            )
        except BaseException:
            # Outcome unknown. The token stays so a retry replays the charge.
            self._move(CheckoutStep.REVIEW)
            await self._release(token)
            logger.warning("checkout.submission_interrupted", token=token)
            raise
        match placed:
            case Error(err):
                await self._release(token)
                if _settled(err):
                    # Providers replay the stored outcome for a known key.
                    self._update(idempotency_token=new_token())
                self._move(CheckoutStep.REVIEW)
                return Error(err)
            case Ok(order):
                pass

        match await self._ledger.complete(token, order.id, self._policy.ledger_ttl):
            case Error(err):
                # The order row carries the token; _resume still finds it.
                logger.error("checkout.ledger_complete_failed", token=token, error=err.message)
            case Ok(_):
                pass

        return await self._finish(order)

    # ═══════════════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════════════

    async def _resume(self, token: str) -> Result[Order | None, CheckoutError]:
        """Order already placed under `token`, if any."""
        match await self._ledger.get(token):
            case Error(err):
                return Error(CheckoutError(CheckoutErrorKind.LEDGER, err.message))
            case Ok(record):
                pass

        # An interrupted submission may have stored the order without a ledger record.
        match await self._orders.find_by_idempotency_key(token):
            case Ok(Order() as order):
                logger.info("checkout.resumed", token=token, order_id=order.id)
                return Ok(order)
            case Ok(None) if record is None:
                return Ok(None)
            case Ok(None) if record.state is SubmissionState.PENDING:
                return Error(CheckoutError(
                    CheckoutErrorKind.SUBMISSION_IN_PROGRESS,
                    "Your order is being placed",
                ))
            case Ok(None):
                return Error(CheckoutError(
                    CheckoutErrorKind.LEDGER,
                    f"Order {record.order_id} recorded for this checkout is missing",
                ))
            case Error(err):
                return Error(CheckoutError(CheckoutErrorKind.ORDER_PERSISTENCE, err.message))

    async def _release(self, token: str) -> None:
        match await self._ledger.release(token):
            case Error(err):
                logger.error("checkout.ledger_release_failed", token=token, error=err.message)
            case Ok(_):
                pass

    async def _finish(self, order: Order) -> Transition:
        """Clear the cart, then DONE. On failure flag the cart stale."""
        for attempt in range(1, self._policy.clear_attempts + 1):
            match await self._store.clear():
                case Ok(_):
                    self._update(order=order)
                    return Ok(self._move(CheckoutStep.DONE))
                case Error(err):
                    logger.warning(
                        "checkout.cart_clear_failed",
                        order_id=order.id,
                        attempt=attempt,
                        error=err.message,
                    )

        await self._store.mark_stale(order.id)
        self._update(order=order)
        self._move(CheckoutStep.REVIEW)
        return Error(CheckoutError(
            CheckoutErrorKind.CART_CLEAR_FAILED,
            f"Order {order.order_number} was placed, but your cart could not be "
            "emptied. Retry to finish checkout.",
            order=order,
        ))

    def _order_placed(self) -> Transition | None:
        if not self._session.awaiting_clear:
            return None
        order = self._session.order
        return Error(CheckoutError(
            CheckoutErrorKind.INVALID_TRANSITION,
            f"Order {order.order_number} was already placed. Retry to finish checkout.",
            order=order,
        ))

    def _require(self, step: CheckoutStep, action: str) -> Transition | None:
        if self._session.step is step:
            return None
        return _rejected(f"Cannot {action} during {self._session.step.value}")

    def _update(self, **changes: object) -> CheckoutSession:
        self._session = replace(self._session, **changes)  # type: ignore[arg-type]
        return self._session

    def _move(self, step: CheckoutStep, **changes: object) -> CheckoutSession:
        previous = self._session.step
        self._update(step=step, **changes)
        if previous is not step:
            logger.info(
                "checkout.step_changed",
                from_step=previous.value,
                to_step=step.value,
                token=self._session.idempotency_token,
            )
        return self._session


__all__ = ("Checkout", "Transition")
