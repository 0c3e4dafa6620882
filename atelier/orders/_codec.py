"""
Order codec — persisted representation of an Order.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from atelier.cart import StoredLineItem
from atelier.pricing import OrderSummary
from atelier.shipping import ShippingAddress, ShippingMethod
from atelier.payment import PaymentMethodRef
from atelier.orders._types import Order, OrderStatus


class StoredSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: int
    tax: int
    shipping: int
    discount: int
    total: int
    item_count: int

    @classmethod
    def from_domain(cls, summary: OrderSummary) -> StoredSummary:
        return cls(
            subtotal=summary.subtotal,
            tax=summary.tax,
            shipping=summary.shipping,
            discount=summary.discount,
            total=summary.total,
            item_count=summary.item_count,
        )

    def to_domain(self) -> OrderSummary:
        return OrderSummary(**self.model_dump())


class StoredAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    address1: str
    city: str
    state: str
    postal_code: str
    country: str = "US"
    company: str | None = None
    address2: str | None = None
    phone: str | None = None

    @classmethod
    def from_domain(cls, address: ShippingAddress) -> StoredAddress:
        return cls(
            first_name=address.first_name,
            last_name=address.last_name,
            address1=address.address1,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
            company=address.company,
            address2=address.address2,
            phone=address.phone,
        )

    def to_domain(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


class StoredShippingMethod(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    price: int
    max_days: int

    @classmethod
    def from_domain(cls, method: ShippingMethod) -> StoredShippingMethod:
        return cls(
            id=method.id,
            name=method.name,
            description=method.description,
            price=method.price,
            max_days=method.max_days,
        )

    def to_domain(self) -> ShippingMethod:
        return ShippingMethod(**self.model_dump())


class StoredOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    order_number: str
    status: OrderStatus
    items: list[StoredLineItem]
    summary: StoredSummary
    charged: StoredSummary
    shipping_address: StoredAddress
    shipping_method: StoredShippingMethod
    payment_method_id: str
    payment_method_label: str | None = None
    payment_confirmation_id: str
    idempotency_key: str
    created_at: datetime
    updated_at: datetime
    estimated_delivery: datetime

    @classmethod
    def from_domain(cls, order: Order) -> StoredOrder:
        return cls(
            id=order.id,
            order_number=order.order_number,
            status=order.status,
            items=[StoredLineItem.from_domain(line) for line in order.items],
            summary=StoredSummary.from_domain(order.summary),
            charged=StoredSummary.from_domain(order.charged),
            shipping_address=StoredAddress.from_domain(order.shipping_address),
            shipping_method=StoredShippingMethod.from_domain(order.shipping_method),
            payment_method_id=order.payment_method.id,
            payment_method_label=order.payment_method.label,
            payment_confirmation_id=order.payment_confirmation_id,
            idempotency_key=order.idempotency_key,
            created_at=order.created_at,
            updated_at=order.updated_at,
            estimated_delivery=order.estimated_delivery,
        )

    def to_domain(self) -> Order:
        return Order(
            id=self.id,
            order_number=self.order_number,
            status=self.status,
            items=tuple(line.to_domain() for line in self.items),
            summary=self.summary.to_domain(),
            charged=self.charged.to_domain(),
            shipping_address=self.shipping_address.to_domain(),
            shipping_method=self.shipping_method.to_domain(),
            payment_method=PaymentMethodRef(self.payment_method_id, self.payment_method_label),
            payment_confirmation_id=self.payment_confirmation_id,
            idempotency_key=self.idempotency_key,
            created_at=self.created_at,
            updated_at=self.updated_at,
            estimated_delivery=self.estimated_delivery,
        )


def encode_order(order: Order) -> str:
    return StoredOrder.from_domain(order).model_dump_json()


def decode_order(payload: str) -> Order:
    return StoredOrder.model_validate_json(payload).to_domain()


__all__ = (
    "StoredSummary",
    "StoredAddress",
    "StoredShippingMethod",
    "StoredOrder",
    "encode_order",
    "decode_order",
)
