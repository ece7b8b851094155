"""
Checkout and order services.

Handles:
1. Choosing the store that serves a cart (delivery or collection)
2. Quoting a cart against that store's fees
3. Placing an order with a frozen pricing snapshot
4. Applying lifecycle transitions to stored orders
5. Recording payment outcomes reported by Stripe
"""

import logging
import secrets
from datetime import datetime
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from storefront_schemas import (
    Actor,
    CartAggregate,
    CartLine,
    CustomerInfo,
    DeliveryType,
    EligibilityResult,
    OrderAction,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    SelectedDeliveryLocation,
    StoreConfig,
)

from apps.web.delivery.exceptions import NoEligibleStore
from apps.web.delivery.hours import ensure_open
from apps.web.delivery.models import Store
from apps.web.delivery.services import get_active_stores, require_deliverable
from apps.web.orders.exceptions import BelowMinimumOrder
from apps.web.orders.lifecycle import transition
from apps.web.orders.models import Order, OrderItem, OrderStatusChange
from apps.web.orders.pricing import ZERO, compose_cart, ensure_minimum_order, line_total
from apps.web.payments.services import (
    PaymentError,
    cancel_payment_intent,
    create_payment_intent,
    create_refund,
)

logger = logging.getLogger(__name__)

# Status -> timestamp field stamped when the order enters it
STATUS_TIMESTAMPS: dict[OrderStatus, str] = {
    OrderStatus.ACCEPTED: "accepted_at",
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
    OrderStatus.REJECTED: "cancelled_at",
}


def generate_confirmation_code() -> str:
    """Generate a unique customer-facing order code."""
    while True:
        code = f"ORD-{secrets.token_hex(3).upper()}"
        if not Order.objects.filter(confirmation_code=code).exists():
            return code


# =============================================================================
# Store selection and quoting
# =============================================================================


def serving_store(
    delivery_type: DeliveryType,
    location: SelectedDeliveryLocation | None = None,
    store_id: int | None = None,
    stores: list[StoreConfig] | None = None,
) -> tuple[StoreConfig, EligibilityResult | None]:
    """
    Store whose fees and minimum apply to a cart.

    Delivery orders are served by the nearest eligible store for the
    selected location. Collection orders name the store explicitly.

    Returns:
        (store, eligibility) - eligibility is None for collection orders.

    Raises:
        NoEligibleStore: If the location is undeliverable or the collection
            store is not active.
        ValueError: If a delivery order has no location or a collection
            order has no store.
    """
    directory = get_active_stores() if stores is None else stores

    if delivery_type == DeliveryType.DELIVERY:
        if location is None:
            raise ValueError("A delivery location is required for delivery orders")
        result = require_deliverable(location, directory)
        return result.nearest_store, result  # type: ignore[return-value]

    if store_id is None:
        raise ValueError("A store is required for collection orders")
    store = next((s for s in directory if s.id == store_id and s.is_active), None)
    if store is None:
        raise NoEligibleStore(
            "Store is not available for collection",
            nearest_store_id=store_id,
        )
    return store, None


def quote_cart(
    lines: list[CartLine],
    delivery_type: DeliveryType,
    location: SelectedDeliveryLocation | None = None,
    store_id: int | None = None,
    discount: Decimal = ZERO,
    stores: list[StoreConfig] | None = None,
) -> tuple[StoreConfig, CartAggregate]:
    """Price a cart with the fees of the store that would serve it."""
    store, _ = serving_store(delivery_type, location, store_id, stores)
    return store, compose_cart(lines, store, discount, delivery_type)


# =============================================================================
# Checkout
# =============================================================================


def place_order(
    lines: list[CartLine],
    customer: CustomerInfo,
    delivery_type: DeliveryType,
    payment_method: PaymentMethod,
    location: SelectedDeliveryLocation | None = None,
    store_id: int | None = None,
    discount: Decimal = ZERO,
    notes: str = "",
    stores: list[StoreConfig] | None = None,
    at: datetime | None = None,
) -> tuple[Order, str | None]:
    """
    Place an order from cart lines.

    The delivery location is passed in explicitly and re-validated with the
    same resolver the storefront uses. The pricing snapshot is computed once
    and frozen onto the order; card and iDEAL orders get a Stripe
    PaymentIntent in the same transaction.

    Returns:
        (order, client_secret) - client_secret is None for cash orders.

    Raises:
        NoEligibleStore: If the location cannot be served.
        StoreClosed: If the serving store is outside its operating hours at
            ``at`` (default: now, in the configured time zone).
        BelowMinimumOrder: If the subtotal is below the store minimum.
        PaymentError: If the PaymentIntent cannot be created (nothing is
            persisted in that case).
    """
    store, eligibility = serving_store(delivery_type, location, store_id, stores)
    ensure_open(store, at or timezone.localtime())
    aggregate = compose_cart(lines, store, discount, delivery_type)

    try:
        ensure_minimum_order(aggregate)
    except BelowMinimumOrder:
        logger.warning(
            "Checkout blocked below minimum: store=%s subtotal=%s minimum=%s",
            store.id,
            aggregate.subtotal,
            aggregate.minimum_order_amount,
        )
        raise

    snapshot = aggregate.snapshot()
    client_secret = None

    with transaction.atomic():
        order = Order.objects.create(
            confirmation_code=generate_confirmation_code(),
            store=Store.objects.get(pk=store.id),
            customer_first_name=customer.first_name,
            customer_last_name=customer.last_name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            delivery_type=delivery_type.value,
            delivery_address=location.address if location else "",
            delivery_latitude=location.coordinate.latitude if location else None,
            delivery_longitude=location.coordinate.longitude if location else None,
            delivery_distance_km=eligibility.distance_km if eligibility else None,
            notes=notes,
            subtotal=snapshot.subtotal,
            discount=snapshot.discount,
            service_fee=snapshot.service_fee,
            tax_amount=snapshot.tax_amount,
            tax_rate_percent=snapshot.tax_rate_percent,
            delivery_fee=snapshot.delivery_fee,
            total=snapshot.total,
            payment_method=payment_method.value,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
        )

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=line.product_id,
                    item_name=line.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    add_ons=[
                        add_on.model_dump(mode="json") for add_on in line.selected_add_ons
                    ],
                    notes=line.notes,
                    line_total=line_total(line),
                )
                for line in lines
            ]
        )

        if payment_method.is_online:
            payment_intent = create_payment_intent(
                amount=snapshot.total,
                payment_method=payment_method,
                metadata={
                    "order_id": str(order.pk),
                    "confirmation_code": order.confirmation_code,
                },
            )
            order.stripe_payment_intent_id = payment_intent.id
            order.save(update_fields=["stripe_payment_intent_id", "updated_at"])
            client_secret = payment_intent.client_secret

    logger.info(
        "Order placed: order_id=%s code=%s store=%s type=%s payment=%s total=%s",
        order.pk,
        order.confirmation_code,
        store.id,
        delivery_type.value,
        payment_method.value,
        snapshot.total,
    )
    return order, client_secret


# =============================================================================
# Lifecycle
# =============================================================================


def apply_transition(
    order: Order,
    action: OrderAction,
    actor: Actor,
    user: object | None = None,
) -> Order:
    """
    Apply a lifecycle action to a stored order.

    This is the only code path that writes Order.status. The row is locked
    for the duration of the check-and-write, the transition is logged as an
    OrderStatusChange and the matching timestamp field is stamped.

    Args:
        order: Order to change (its in-memory status is not trusted).
        action: Requested action.
        actor: Who requests it.
        user: Staff user performing the action, if any.

    Returns:
        The refreshed order.

    Raises:
        InvalidTransition: If the action is not legal from the stored status.
    """
    with transaction.atomic():
        locked = Order.objects.select_for_update().get(pk=order.pk)
        change = transition(locked.current_status, action, actor)

        locked.status = change.to_status.value
        locked.status_changed_at = change.changed_at
        update_fields = ["status", "status_changed_at", "updated_at"]

        timestamp_field = STATUS_TIMESTAMPS.get(change.to_status)
        if timestamp_field:
            setattr(locked, timestamp_field, change.changed_at)
            update_fields.append(timestamp_field)

        locked.save(update_fields=update_fields)

        OrderStatusChange.objects.create(
            order=locked,
            from_status=change.from_status.value,
            to_status=change.to_status.value,
            action=change.action.value,
            actor=change.actor.value,
            changed_by=user if getattr(user, "is_authenticated", False) else None,
            changed_at=change.changed_at,
        )

    logger.info(
        "Order status changed: order_id=%s %s -> %s action=%s actor=%s",
        locked.pk,
        change.from_status.value,
        change.to_status.value,
        change.action.value,
        change.actor.value,
    )
    return locked


def _release_payment(order: Order) -> Order:
    """Refund or void the online payment of a cancelled/rejected order."""
    if not order.stripe_payment_intent_id:
        return order

    try:
        if order.payment_status == PaymentStatus.PAID.value:
            create_refund(order.stripe_payment_intent_id)
            order.payment_status = PaymentStatus.REFUNDED.value
            order.save(update_fields=["payment_status", "updated_at"])
            logger.info("Payment refunded: order_id=%s", order.pk)
        elif order.payment_status == PaymentStatus.PENDING.value:
            cancel_payment_intent(order.stripe_payment_intent_id)
            logger.info("Payment intent cancelled: order_id=%s", order.pk)
    except PaymentError as e:
        # Status change stands; staff settle the payment in the Stripe dashboard
        logger.error(
            "Failed to release payment: order_id=%s error=%s code=%s",
            order.pk,
            e.message,
            e.code,
        )
    return order


def cancel_order(order: Order, actor: Actor = Actor.CUSTOMER, user: object | None = None) -> Order:
    """Cancel an order and release any online payment."""
    order = apply_transition(order, OrderAction.CANCEL, actor, user)
    return _release_payment(order)


def reject_order(order: Order, user: object | None = None) -> Order:
    """Reject an order (staff) and release any online payment."""
    order = apply_transition(order, OrderAction.REJECT, Actor.ADMIN, user)
    return _release_payment(order)


def advance_order(order: Order, user: object | None = None) -> Order:
    """Move an order one step along the fulfilment flow (staff)."""
    return apply_transition(order, OrderAction.ADVANCE, Actor.ADMIN, user)


# =============================================================================
# Payment outcomes
# =============================================================================


def confirm_payment(order: Order) -> Order:
    """
    Record a successful payment and confirm the order.

    Safe to call repeatedly: an order that has already left ``pending`` only
    has its payment status recorded. A payment that lands after the order
    was cancelled or rejected is refunded straight away.
    """
    if order.payment_status == PaymentStatus.REFUNDED.value:
        logger.info("Payment already refunded, skipping confirm: order_id=%s", order.pk)
        return order

    if order.payment_status != PaymentStatus.PAID.value:
        order.payment_status = PaymentStatus.PAID.value
        order.save(update_fields=["payment_status", "updated_at"])

    if order.current_status in (OrderStatus.CANCELLED, OrderStatus.REJECTED):
        logger.warning(
            "Payment received for closed order, refunding: order_id=%s status=%s",
            order.pk,
            order.status,
        )
        return _release_payment(order)

    if order.current_status != OrderStatus.PENDING:
        logger.info(
            "Order already processed, skipping confirm: order_id=%s status=%s",
            order.pk,
            order.status,
        )
        return order

    return apply_transition(order, OrderAction.CONFIRM, Actor.SYSTEM)


def record_payment_failure(order: Order, reason: str = "") -> Order:
    """Mark an order's payment as failed; the order stays pending."""
    order.payment_status = PaymentStatus.FAILED.value
    order.save(update_fields=["payment_status", "updated_at"])
    logger.info(
        "Payment failed for order: order_id=%s confirmation_code=%s reason=%s",
        order.pk,
        order.confirmation_code,
        reason or "unknown",
    )
    return order
