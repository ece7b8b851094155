"""
URL routing for cart and order API endpoints.

Customer endpoints are public and CORS-enabled; lifecycle actions other than
customer cancellation require a staff session.
"""

from django.urls import path

from apps.web.orders import views

app_name = "orders"

urlpatterns = [
    # Cart
    path("cart/quote", views.cart_quote, name="cart_quote"),
    path("cart/edit", views.cart_edit, name="cart_edit"),
    # Orders
    path("orders", views.create_order, name="order_create"),
    path("orders/<int:order_id>", views.order_detail, name="order_detail"),
    path("orders/<int:order_id>/status", views.order_status, name="order_status"),
    path("orders/<int:order_id>/cancel", views.cancel_order, name="order_cancel"),
    # Back office
    path("orders/<int:order_id>/advance", views.advance_order, name="order_advance"),
    path("orders/<int:order_id>/reject", views.reject_order, name="order_reject"),
    path(
        "orders/<int:order_id>/cancel-admin",
        views.cancel_order_admin,
        name="order_cancel_admin",
    ),
]
