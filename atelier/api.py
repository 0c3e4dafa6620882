"""
HTTP surface: the UI-facing mutation API as a FastAPI app.

    shop = await Shop.in_memory(catalog, gateway)
    app = create_app(shop)

Request models convert to domain values with `to_domain()`, response models
are built with `from_domain()`. Failures come back as

    {"detail": {"kind": "validation", "message": "missing shipping city", "fields": ["city"]}}
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

import fastapi
from kungfu import Result, Ok, Error
from pydantic import BaseModel, Field

from atelier.cart import CartState, CartError, CartErrorKind, LineItem
from atelier.checkout import Checkout, CheckoutSession, CheckoutError, CheckoutErrorKind
from atelier.orders import Order, OrderError, OrderErrorKind
from atelier.payment import PaymentMethodRef
from atelier.pricing import OrderSummary
from atelier.shipping import ShippingAddress, ShippingMethod
from atelier.shop import Shop


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class AddItemRequest(BaseModel):
    product_id: str
    quantity: int = 1
    size: str | None = None
    color: str | None = None


class UpdateQuantityRequest(BaseModel):
    quantity: int


class AddressRequest(BaseModel):
    # Blank required fields are reported by the checkout, by name.
    first_name: str = ""
    last_name: str = ""
    address1: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "US"
    company: str | None = None
    address2: str | None = None
    phone: str | None = None

    def to_domain(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


class ShippingMethodRequest(BaseModel):
    method_id: str


class PaymentMethodRequest(BaseModel):
    id: str = Field(min_length=1)
    label: str | None = None

    def to_domain(self) -> PaymentMethodRef:
        return PaymentMethodRef(self.id, self.label)


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class SummaryView(BaseModel):
    subtotal: int
    tax: int
    shipping: int
    discount: int
    total: int
    item_count: int
    display: dict[str, str | int]

    @classmethod
    def from_domain(cls, summary: OrderSummary) -> SummaryView:
        return cls(
            subtotal=summary.subtotal,
            tax=summary.tax,
            shipping=summary.shipping,
            discount=summary.discount,
            total=summary.total,
            item_count=summary.item_count,
            display=summary.display(),
        )


class LineView(BaseModel):
    id: str
    product_id: str
    name: str
    brand: str
    image: str | None
    quantity: int
    unit_price: int
    line_total: int
    size: str | None
    color: str | None

    @classmethod
    def from_domain(cls, line: LineItem) -> LineView:
        return cls(
            id=line.id,
            product_id=line.product.id,
            name=line.product.name,
            brand=line.product.brand,
            image=line.product.image,
            quantity=line.quantity,
            unit_price=line.unit_price,
            line_total=line.line_total,
            size=line.selected_size,
            color=line.selected_color,
        )


class CartView(BaseModel):
    items: list[LineView]
    summary: SummaryView
    stale_order_id: str | None

    @classmethod
    def from_domain(cls, state: CartState) -> CartView:
        return cls(
            items=[LineView.from_domain(line) for line in state.items],
            summary=SummaryView.from_domain(state.summary),
            stale_order_id=state.stale_order_id,
        )


class ShippingMethodView(BaseModel):
    id: str
    name: str
    description: str
    price: int
    label: str

    @classmethod
    def from_domain(cls, method: ShippingMethod) -> ShippingMethodView:
        return cls(
            id=method.id,
            name=method.name,
            description=method.description,
            price=method.price,
            label=method.label,
        )


class OrderView(BaseModel):
    id: str
    order_number: str
    status: str
    items: list[LineView]
    charged: SummaryView
    shipping_method: ShippingMethodView
    created_at: datetime
    estimated_delivery: datetime

    @classmethod
    def from_domain(cls, order: Order) -> OrderView:
        return cls(
            id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            items=[LineView.from_domain(line) for line in order.items],
            charged=SummaryView.from_domain(order.charged),
            shipping_method=ShippingMethodView.from_domain(order.shipping_method),
            created_at=order.created_at,
            estimated_delivery=order.estimated_delivery,
        )


class CheckoutView(BaseModel):
    step: str
    token: str
    shipping_address: dict[str, Any] | None
    shipping_method: ShippingMethodView | None
    payment_method: str | None
    review: SummaryView
    order: OrderView | None
    awaiting_clear: bool

    @classmethod
    def from_domain(cls, checkout: Checkout) -> CheckoutView:
        session: CheckoutSession = checkout.session
        address = session.shipping_address
        return cls(
            step=session.step.value,
            token=session.idempotency_token,
            shipping_address=(
                AddressRequest.model_validate(address, from_attributes=True).model_dump()
                if address is not None
                else None
            ),
            shipping_method=(
                ShippingMethodView.from_domain(session.shipping_method)
                if session.shipping_method is not None
                else None
            ),
            payment_method=(
                session.payment_method.label or session.payment_method.id
                if session.payment_method is not None
                else None
            ),
            review=SummaryView.from_domain(checkout.review_summary()),
            order=OrderView.from_domain(session.order) if session.order is not None else None,
            awaiting_clear=session.awaiting_clear,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Error mapping
# ═══════════════════════════════════════════════════════════════════════════════

_CART_STATUS = {
    CartErrorKind.VALIDATION: 422,
    CartErrorKind.PERSISTENCE: 503,
    CartErrorKind.CATALOG: 502,
}

_CHECKOUT_STATUS = {
    CheckoutErrorKind.VALIDATION: 422,
    CheckoutErrorKind.INVALID_TRANSITION: 409,
    CheckoutErrorKind.EMPTY_CART: 409,
    CheckoutErrorKind.SUBMISSION_IN_PROGRESS: 409,
    CheckoutErrorKind.PAYMENT_DECLINED: 402,
    CheckoutErrorKind.PAYMENT_FAILED: 502,
    CheckoutErrorKind.PAYMENT_TIMEOUT: 504,
    CheckoutErrorKind.ORDER_PERSISTENCE: 503,
    CheckoutErrorKind.CART_CLEAR_FAILED: 503,
    CheckoutErrorKind.STALE_CART: 409,
    CheckoutErrorKind.LEDGER: 503,
}

_ORDER_STATUS = {
    OrderErrorKind.NOT_FOUND: 404,
    OrderErrorKind.DUPLICATE: 409,
    OrderErrorKind.INVALID_STATUS: 409,
    OrderErrorKind.PERSISTENCE: 503,
}


def _kind(kind: Enum) -> str:
    return kind.name.lower()


def _raise(error: CartError | CheckoutError | OrderError) -> fastapi.HTTPException:
    detail: dict[str, Any] = {"kind": _kind(error.kind), "message": error.message}
    match error:
        case CartError(kind=kind):
            status = _CART_STATUS[kind]
        case CheckoutError(kind=kind, fields=fields, order=order, charge_outstanding=outstanding):
            status = _CHECKOUT_STATUS[kind]
            detail["fields"] = list(fields)
            detail["charge_outstanding"] = outstanding
            if order is not None:
                detail["order_id"] = order.id
                detail["order_number"] = order.order_number
        case OrderError(kind=kind):
            status = _ORDER_STATUS[kind]
    return fastapi.HTTPException(status_code=status, detail=detail)


def _cart(result: Result[CartState, CartError]) -> CartView:
    match result:
        case Ok(state):
            return CartView.from_domain(state)
        case Error(err):
            raise _raise(err)


# ═══════════════════════════════════════════════════════════════════════════════
# App
# ═══════════════════════════════════════════════════════════════════════════════


def create_app(shop: Shop) -> fastapi.FastAPI:
    app = fastapi.FastAPI(title="atelier")

    def current_checkout() -> Checkout:
        checkout = shop.checkout
        if checkout is None:
            raise fastapi.HTTPException(
                status_code=404,
                detail={"kind": "not_found", "message": "No checkout in progress"},
            )
        return checkout

    def transition(checkout: Checkout, result: Result[CheckoutSession, CheckoutError]) -> CheckoutView:
        match result:
            case Ok(_):
                return CheckoutView.from_domain(checkout)
            case Error(err):
                raise _raise(err)

    # ── Cart ──────────────────────────────────────────────────────────────

    @app.get("/cart")
    async def get_cart() -> CartView:
        return CartView.from_domain(shop.store.get_state())

    @app.post("/cart/items")
    async def add_item(req: AddItemRequest) -> CartView:
        return _cart(await shop.store.add_from_catalog(
            shop.catalog, req.product_id, req.quantity, req.size, req.color
        ))

    @app.patch("/cart/items/{line_id}")
    async def update_item(line_id: str, req: UpdateQuantityRequest) -> CartView:
        return _cart(await shop.store.update_quantity(line_id, req.quantity))

    @app.delete("/cart/items/{line_id}")
    async def remove_item(line_id: str) -> CartView:
        return _cart(await shop.store.remove(line_id))

    @app.delete("/cart")
    async def clear_cart() -> CartView:
        return _cart(await shop.store.clear())

    # ── Checkout ──────────────────────────────────────────────────────────

    @app.get("/shipping-methods")
    async def shipping_methods() -> list[ShippingMethodView]:
        return [ShippingMethodView.from_domain(m) for m in shop.settings.checkout.shipping_methods]

    @app.post("/checkout")
    async def begin_checkout() -> CheckoutView:
        return CheckoutView.from_domain(shop.begin_checkout())

    @app.get("/checkout")
    async def get_checkout() -> CheckoutView:
        return CheckoutView.from_domain(current_checkout())

    @app.put("/checkout/shipping-address")
    async def set_address(req: AddressRequest) -> CheckoutView:
        checkout = current_checkout()
        return transition(checkout, checkout.set_shipping_address(req.to_domain()))

    @app.put("/checkout/shipping-method")
    async def set_method(req: ShippingMethodRequest) -> CheckoutView:
        checkout = current_checkout()
        return transition(checkout, checkout.select_shipping_method(req.method_id))

    @app.put("/checkout/payment-method")
    async def set_payment(req: PaymentMethodRequest) -> CheckoutView:
        checkout = current_checkout()
        return transition(checkout, checkout.set_payment_method(req.to_domain()))

    @app.post("/checkout/payment-method/collect")
    async def collect_payment() -> CheckoutView:
        checkout = current_checkout()
        return transition(checkout, await checkout.collect_payment())

    @app.post("/checkout/advance")
    async def advance() -> CheckoutView:
        checkout = current_checkout()
        return transition(checkout, checkout.advance())

    @app.post("/checkout/back")
    async def back() -> CheckoutView:
        checkout = current_checkout()
        return transition(checkout, checkout.back())

    @app.post("/checkout/cancel")
    async def cancel() -> CheckoutView:
        checkout = current_checkout()
        return transition(checkout, checkout.cancel())

    @app.post("/checkout/submit")
    async def submit() -> CheckoutView:
        checkout = current_checkout()
        return transition(checkout, await checkout.submit())

    # ── Orders ────────────────────────────────────────────────────────────

    @app.get("/orders/{order_id}")
    async def get_order(order_id: str) -> OrderView:
        match await shop.orders.get(order_id):
            case Ok(order):
                return OrderView.from_domain(order)
            case Error(err):
                raise _raise(err)

    return app


__all__ = (
    "AddItemRequest",
    "UpdateQuantityRequest",
    "AddressRequest",
    "ShippingMethodRequest",
    "PaymentMethodRequest",
    "SummaryView",
    "LineView",
    "CartView",
    "ShippingMethodView",
    "OrderView",
    "CheckoutView",
    "create_app",
)
