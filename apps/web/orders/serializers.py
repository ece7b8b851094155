"""
Pydantic schemas for cart and order API requests and responses.

These schemas define the public API contract for checkout and order
tracking.
"""

from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator

from storefront_schemas import (
    Actor,
    CartAggregate,
    CartEdit,
    CartLine,
    CustomerInfo,
    DeliveryInfo,
    DeliveryType,
    OrderAction,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PricingSnapshot,
    SelectedDeliveryLocation,
    StatusChange,
    StoreConfig,
)

from apps.web.orders.lifecycle import allowed_actions, can_cancel
from apps.web.orders.models import Order
from apps.web.orders.pricing import line_total

# =============================================================================
# Requests
# =============================================================================


class FulfilmentRequest(BaseModel):
    """How the cart will be fulfilled; decides which store prices it."""

    delivery_type: DeliveryType = DeliveryType.DELIVERY
    location: SelectedDeliveryLocation | None = None
    store_id: int | None = None

    @model_validator(mode="after")
    def check_fulfilment(self) -> Self:
        if self.delivery_type == DeliveryType.DELIVERY and self.location is None:
            raise ValueError("A delivery location is required for delivery orders")
        if self.delivery_type == DeliveryType.COLLECTION and self.store_id is None:
            raise ValueError("A store is required for collection orders")
        return self


class CartQuoteRequest(FulfilmentRequest):
    """
    POST /api/cart/quote.

    Discounts are applied server-side only; a client-sent discount field is
    ignored.
    """

    lines: list[CartLine] = Field(min_length=1)


class CartEditRequest(FulfilmentRequest):
    """POST /api/cart/edit."""

    lines: list[CartLine] = Field(min_length=1)
    edit: CartEdit

    @model_validator(mode="after")
    def check_index(self) -> Self:
        if self.edit.index >= len(self.lines):
            raise ValueError(f"Cart has no line {self.edit.index}")
        return self


class OrderCreateRequest(CartQuoteRequest):
    """POST /api/orders."""

    customer: CustomerInfo
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str = Field(default="", max_length=1000)


# =============================================================================
# Responses
# =============================================================================


class QuotedLineSchema(BaseModel):
    """Price of one cart line."""

    product_id: str
    quantity: int
    line_total: Decimal


class CartQuoteResponse(BaseModel):
    """Response for POST /api/cart/quote."""

    store_id: int
    store_name: str
    lines: list[QuotedLineSchema]
    totals: CartAggregate
    store_open: bool = True

    @classmethod
    def build(
        cls,
        store: StoreConfig,
        lines: list[CartLine],
        aggregate: CartAggregate,
        store_open: bool = True,
    ) -> "CartQuoteResponse":
        return cls(
            store_id=store.id,
            store_name=store.name,
            store_open=store_open,
            lines=[
                QuotedLineSchema(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    line_total=line_total(line),
                )
                for line in lines
            ],
            totals=aggregate,
        )


class CartEditResponse(BaseModel):
    """Response for POST /api/cart/edit; quote is None once the cart is empty."""

    lines: list[CartLine]
    quote: CartQuoteResponse | None = None


class OrderCreateResponse(BaseModel):
    """Response for POST /api/orders."""

    order_id: int
    confirmation_code: str
    status: OrderStatus
    payment_method: PaymentMethod
    pricing: PricingSnapshot
    client_secret: str | None = None
    created_at: datetime


class OrderItemSchema(BaseModel):
    """Line item snapshot on a placed order."""

    id: int
    product_id: str
    item_name: str
    quantity: int
    unit_price: Decimal
    add_ons: list[dict[str, object]]
    notes: str
    line_total: Decimal


class OrderStatusResponse(BaseModel):
    """Response for GET /api/orders/{id}/status."""

    order_id: int
    confirmation_code: str
    status: OrderStatus
    payment_status: PaymentStatus
    can_cancel: bool
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderStatusResponse":
        return cls(
            order_id=order.pk,
            confirmation_code=order.confirmation_code,
            status=order.current_status,
            payment_status=PaymentStatus(order.payment_status),
            can_cancel=can_cancel(order.current_status),
            updated_at=order.updated_at,
        )


class OrderDetailResponse(OrderStatusResponse):
    """Response for GET /api/orders/{id}."""

    store_id: int
    payment_method: PaymentMethod
    customer: CustomerInfo
    delivery: DeliveryInfo
    notes: str
    items: list[OrderItemSchema]
    pricing: PricingSnapshot
    admin_actions: list[OrderAction]
    history: list[StatusChange]
    created_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderDetailResponse":
        status = OrderStatusResponse.from_order(order)
        return cls(
            **status.model_dump(),
            store_id=order.store_id,
            payment_method=PaymentMethod(order.payment_method),
            customer=CustomerInfo(
                first_name=order.customer_first_name,
                last_name=order.customer_last_name,
                email=order.customer_email,
                phone=order.customer_phone,
            ),
            delivery=DeliveryInfo(
                type=DeliveryType(order.delivery_type),
                address=order.delivery_address,
                coordinate=order.delivery_coordinate,
            ),
            notes=order.notes,
            items=[
                OrderItemSchema(
                    id=item.pk,
                    product_id=item.product_id,
                    item_name=item.item_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    add_ons=item.add_ons,
                    notes=item.notes,
                    line_total=item.line_total,
                )
                for item in order.items.all()
            ],
            pricing=order.pricing_snapshot(),
            admin_actions=allowed_actions(order.current_status, Actor.ADMIN),
            history=[
                StatusChange(
                    from_status=OrderStatus(change.from_status),
                    to_status=OrderStatus(change.to_status),
                    action=OrderAction(change.action),
                    actor=Actor(change.actor),
                    changed_at=change.changed_at,
                )
                for change in order.status_changes.all()
            ],
            created_at=order.created_at,
        )
