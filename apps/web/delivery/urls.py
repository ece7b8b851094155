"""
URL routing for store and delivery API endpoints.

All endpoints are public (no auth required) and CORS-enabled.
"""

from django.urls import path

from apps.web.delivery import views

app_name = "delivery"

urlpatterns = [
    # Store directory
    path("stores", views.store_list, name="store_list"),
    path("stores/nearest", views.nearest, name="store_nearest"),
    path("stores/in-range", views.in_range, name="stores_in_range"),
    path(
        "stores/validate-delivery",
        views.validate_delivery,
        name="validate_delivery",
    ),
    # Location picker
    path("addresses/suggest", views.address_suggestions, name="address_suggest"),
    path("addresses/reverse", views.address_at_location, name="address_reverse"),
]
