"""Admin registration for delivery models."""

from django.contrib import admin

from apps.web.delivery.models import Store


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    """Admin for stores and their delivery settings."""

    list_display = [
        "name",
        "code",
        "city",
        "radius_km",
        "delivery_fee",
        "minimum_order_amount",
        "is_active",
        "show_on_website",
    ]
    list_filter = ["is_active", "show_on_website", "city"]
    search_fields = ["name", "code", "city", "postal_code"]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = [
        (None, {"fields": ["name", "code"]}),
        (
            "Address",
            {"fields": ["street", "postal_code", "city", "country"]},
        ),
        ("Location", {"fields": ["latitude", "longitude"]}),
        (
            "Delivery",
            {
                "fields": [
                    "radius_km",
                    "coverage_cities",
                    "delivery_fee",
                    "minimum_order_amount",
                    "estimated_minutes_min",
                    "estimated_minutes_max",
                ]
            },
        ),
        ("Pricing", {"fields": ["service_fee", "tax_rate_percent"]}),
        ("Hours", {"fields": ["operating_hours"]}),
        ("Status", {"fields": ["is_active", "show_on_website"]}),
        (
            "Timestamps",
            {"fields": ["created_at", "updated_at"], "classes": ["collapse"]},
        ),
    ]
