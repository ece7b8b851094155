"""Admin registration for order models."""

from collections.abc import Callable

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest

from storefront_schemas import Actor

from apps.web.orders import services
from apps.web.orders.exceptions import InvalidTransition
from apps.web.orders.models import Order, OrderItem, OrderStatusChange


class OrderItemInline(admin.TabularInline):
    """Inline for items within an order."""

    model = OrderItem
    extra = 0
    fields = ["item_name", "quantity", "unit_price", "add_ons", "line_total"]
    readonly_fields = ["item_name", "quantity", "unit_price", "add_ons", "line_total"]


class OrderStatusChangeInline(admin.TabularInline):
    """Read-only transition log."""

    model = OrderStatusChange
    extra = 0
    can_delete = False
    fields = ["changed_at", "from_status", "to_status", "action", "actor", "changed_by"]
    readonly_fields = fields


def _run_transition(
    request: HttpRequest,
    queryset: QuerySet[Order],
    operation: Callable[[Order], Order],
    verb: str,
) -> None:
    changed = 0
    for order in queryset:
        try:
            operation(order)
        except InvalidTransition as e:
            messages.warning(request, f"{order.confirmation_code}: {e.message}")
            continue
        changed += 1
    if changed:
        messages.success(request, f"{verb} {changed} order(s)")


@admin.action(description="Advance to next status")
def advance_orders(
    _modeladmin: admin.ModelAdmin,
    request: HttpRequest,
    queryset: QuerySet[Order],
) -> None:
    _run_transition(
        request,
        queryset,
        lambda order: services.advance_order(order, user=request.user),
        "Advanced",
    )


@admin.action(description="Reject selected orders")
def reject_orders(
    _modeladmin: admin.ModelAdmin,
    request: HttpRequest,
    queryset: QuerySet[Order],
) -> None:
    _run_transition(
        request,
        queryset,
        lambda order: services.reject_order(order, user=request.user),
        "Rejected",
    )


@admin.action(description="Cancel selected orders")
def cancel_orders(
    _modeladmin: admin.ModelAdmin,
    request: HttpRequest,
    queryset: QuerySet[Order],
) -> None:
    _run_transition(
        request,
        queryset,
        lambda order: services.cancel_order(order, Actor.ADMIN, user=request.user),
        "Cancelled",
    )


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin for orders.

    Status and pricing are read-only here; status changes go through the
    lifecycle actions so every change is validated and logged.
    """

    list_display = [
        "confirmation_code",
        "customer_name",
        "store",
        "status",
        "delivery_type",
        "total",
        "payment_method",
        "payment_status",
        "created_at",
    ]
    list_filter = ["status", "delivery_type", "payment_method", "payment_status", "store"]
    search_fields = [
        "confirmation_code",
        "customer_first_name",
        "customer_last_name",
        "customer_email",
        "customer_phone",
    ]
    inlines = [OrderItemInline, OrderStatusChangeInline]
    actions = [advance_orders, reject_orders, cancel_orders]
    readonly_fields = [
        "status",
        "payment_status",
        "stripe_payment_intent_id",
        "subtotal",
        "discount",
        "service_fee",
        "tax_amount",
        "tax_rate_percent",
        "delivery_fee",
        "total",
        "created_at",
        "updated_at",
        "status_changed_at",
        "accepted_at",
        "confirmed_at",
        "ready_at",
        "delivered_at",
        "cancelled_at",
    ]
    date_hierarchy = "created_at"

    fieldsets = [
        (None, {"fields": ["store", "confirmation_code", "status"]}),
        (
            "Customer",
            {
                "fields": [
                    "customer_first_name",
                    "customer_last_name",
                    "customer_email",
                    "customer_phone",
                ]
            },
        ),
        (
            "Fulfilment",
            {
                "fields": [
                    "delivery_type",
                    "delivery_address",
                    "delivery_latitude",
                    "delivery_longitude",
                    "delivery_distance_km",
                    "notes",
                ]
            },
        ),
        (
            "Pricing",
            {
                "fields": [
                    "subtotal",
                    "discount",
                    "service_fee",
                    "tax_rate_percent",
                    "tax_amount",
                    "delivery_fee",
                    "total",
                ]
            },
        ),
        (
            "Payment",
            {"fields": ["payment_method", "payment_status", "stripe_payment_intent_id"]},
        ),
        (
            "Timestamps",
            {
                "fields": [
                    "created_at",
                    "updated_at",
                    "status_changed_at",
                    "accepted_at",
                    "confirmed_at",
                    "ready_at",
                    "delivered_at",
                    "cancelled_at",
                ]
            },
        ),
    ]
