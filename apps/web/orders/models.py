"""
Order models - placed orders, their line items and status history.

Pricing fields are a snapshot taken when the order is placed; they never
follow later changes to the store's fee configuration. Status is written
only through apps.web.orders.services.apply_transition.
"""

from django.conf import settings
from django.db import models

from storefront_schemas import (
    Actor,
    Coordinate,
    DeliveryType,
    OrderAction,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PricingSnapshot,
)

from apps.web.core.models import TimestampedModel


def _choices(enum: type) -> list[tuple[str, str]]:
    return [(member.value, member.value.replace("_", " ").title()) for member in enum]


class Order(TimestampedModel):
    """
    Customer order.

    Tracks fulfilment, the frozen pricing snapshot, payment and lifecycle.
    """

    confirmation_code = models.CharField(
        max_length=20,
        unique=True,
        help_text="Customer-facing confirmation code",
    )
    store = models.ForeignKey(
        "delivery.Store",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    # Customer information
    customer_first_name = models.CharField(max_length=100)
    customer_last_name = models.CharField(max_length=100, blank=True)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=20, blank=True)

    # Fulfilment
    delivery_type = models.CharField(
        max_length=20,
        choices=_choices(DeliveryType),
    )
    delivery_address = models.TextField(blank=True)
    delivery_latitude = models.FloatField(null=True, blank=True)
    delivery_longitude = models.FloatField(null=True, blank=True)
    delivery_distance_km = models.FloatField(null=True, blank=True)
    notes = models.TextField(blank=True)

    # Pricing snapshot
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    service_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax_rate_percent = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=10, decimal_places=2)

    # Payment
    payment_method = models.CharField(
        max_length=20,
        choices=_choices(PaymentMethod),
        default=PaymentMethod.CASH.value,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=_choices(PaymentStatus),
        default=PaymentStatus.PENDING.value,
    )
    stripe_payment_intent_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Stripe PaymentIntent ID",
    )

    # Lifecycle
    status = models.CharField(
        max_length=20,
        choices=_choices(OrderStatus),
        default=OrderStatus.PENDING.value,
    )
    status_changed_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    ready_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the order was cancelled or rejected",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["store", "status"]),
            models.Index(fields=["stripe_payment_intent_id"]),
        ]

    def __str__(self) -> str:
        return f"Order {self.confirmation_code or self.pk} - {self.customer_name}"

    @property
    def customer_name(self) -> str:
        return f"{self.customer_first_name} {self.customer_last_name}".strip()

    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def delivery_coordinate(self) -> Coordinate | None:
        if self.delivery_latitude is None or self.delivery_longitude is None:
            return None
        return Coordinate(
            latitude=self.delivery_latitude,
            longitude=self.delivery_longitude,
        )

    def pricing_snapshot(self) -> PricingSnapshot:
        """The pricing values frozen at checkout."""
        return PricingSnapshot(
            subtotal=self.subtotal,
            discount=self.discount,
            service_fee=self.service_fee,
            tax_amount=self.tax_amount,
            tax_rate_percent=self.tax_rate_percent,
            delivery_fee=self.delivery_fee,
            total=self.total,
        )


class OrderItem(TimestampedModel):
    """
    Line item in an order.

    Stores a snapshot of the cart line, including its add-ons, at order time.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product_id = models.CharField(max_length=64)
    item_name = models.CharField(max_length=200, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    add_ons = models.JSONField(
        default=list,
        blank=True,
        help_text="Per-serving add-ons with ids, names, prices and quantities",
    )
    notes = models.TextField(blank=True)
    line_total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="(unit_price + add-on bundle price) * quantity",
    )

    class Meta:
        ordering = ["pk"]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.item_name or self.product_id}"


class OrderStatusChange(models.Model):
    """Audit record of one lifecycle transition."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="status_changes",
    )
    from_status = models.CharField(max_length=20, choices=_choices(OrderStatus))
    to_status = models.CharField(max_length=20, choices=_choices(OrderStatus))
    action = models.CharField(max_length=20, choices=_choices(OrderAction))
    actor = models.CharField(max_length=20, choices=_choices(Actor))
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )
    changed_at = models.DateTimeField()

    class Meta:
        ordering = ["changed_at", "pk"]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.from_status} -> {self.to_status}"
