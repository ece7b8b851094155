"""
URL configuration for the storefront.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # Public API endpoints
    path("api/", include("apps.web.delivery.urls")),
    path("api/", include("apps.web.orders.urls")),
    path("payments/", include("apps.web.payments.urls")),
]
