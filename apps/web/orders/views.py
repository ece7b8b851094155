"""
Cart and order API views.

These endpoints are used by the storefront frontend and the back office:
- Cart quotes and edits (live pricing while the customer edits the cart)
- Order placement (with idempotency support)
- Order tracking and customer cancellation
- Staff lifecycle actions (advance, reject, cancel)

Customer order endpoints take the confirmation code as ``?code=``; a
missing or wrong code is answered as if the order did not exist. Staff
sessions may omit it.
"""

import hmac
import logging
from collections.abc import Callable

from django.http import Http404, HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from storefront_schemas import Actor, CartLine

from apps.web.core.decorators import idempotency_key_required, json_response, staff_required
from apps.web.core.exceptions import StorefrontError
from apps.web.core.serializers import parse_body
from apps.web.delivery.exceptions import NoEligibleStore, StoreClosed
from apps.web.delivery.hours import is_open
from apps.web.orders import services
from apps.web.orders.cart import apply_edit
from apps.web.orders.exceptions import BelowMinimumOrder, InvalidTransition
from apps.web.orders.models import Order
from apps.web.orders.serializers import (
    CartEditRequest,
    CartEditResponse,
    CartQuoteRequest,
    CartQuoteResponse,
    OrderCreateRequest,
    OrderCreateResponse,
    OrderDetailResponse,
    OrderStatusResponse,
)
from apps.web.payments.services import PaymentError

logger = logging.getLogger(__name__)

# HTTP status for each recoverable storefront error
ERROR_STATUS: dict[type[StorefrontError], int] = {
    NoEligibleStore: 422,
    BelowMinimumOrder: 422,
    StoreClosed: 422,
    InvalidTransition: 409,
}


def _error_response(error: StorefrontError) -> JsonResponse:
    return json_response(error.to_dict(), status=ERROR_STATUS.get(type(error), 400))


def _get_order_or_404(order_id: int) -> Order:
    try:
        return Order.objects.prefetch_related("items", "status_changes").get(pk=order_id)
    except Order.DoesNotExist as exc:
        raise Http404(f"Order {order_id} not found") from exc


def _get_customer_order(request: HttpRequest, order_id: int) -> Order:
    """Load an order for a customer endpoint, checking the confirmation code."""
    order = _get_order_or_404(order_id)
    if getattr(request.user, "is_staff", False):
        return order

    code = request.GET.get("code", "").strip().upper()
    if not code or not hmac.compare_digest(
        code.encode(), order.confirmation_code.upper().encode()
    ):
        logger.info("Order lookup with missing or wrong code: order_id=%s", order_id)
        raise Http404(f"Order {order_id} not found")
    return order


def _quote(
    body: CartQuoteRequest | CartEditRequest,
    lines: list[CartLine],
) -> CartQuoteResponse:
    store, aggregate = services.quote_cart(
        lines,
        body.delivery_type,
        location=body.location,
        store_id=body.store_id,
    )
    return CartQuoteResponse.build(
        store, lines, aggregate, store_open=is_open(store, timezone.localtime())
    )


@csrf_exempt
@require_POST
def cart_quote(request: HttpRequest) -> JsonResponse:
    """
    POST /api/cart/quote

    Price the cart with the serving store's fees.

    Request body: CartQuoteRequest schema
    Response: CartQuoteResponse schema (200)
    """
    body = parse_body(request, CartQuoteRequest)
    if isinstance(body, JsonResponse):
        return body

    try:
        response = _quote(body, body.lines)
    except NoEligibleStore as e:
        return _error_response(e)

    return json_response(response.model_dump(mode="json"))


@csrf_exempt
@require_POST
def cart_edit(request: HttpRequest) -> JsonResponse:
    """
    POST /api/cart/edit

    Apply one edit (quantity or add-on change) to the cart and re-price it.

    Request body: CartEditRequest schema
    Response: CartEditResponse schema (200); quote is null when the edit
    empties the cart
    """
    body = parse_body(request, CartEditRequest)
    if isinstance(body, JsonResponse):
        return body

    lines = apply_edit(body.lines, body.edit)
    if not lines:
        return json_response(CartEditResponse(lines=[]).model_dump(mode="json"))

    try:
        quote = _quote(body, lines)
    except NoEligibleStore as e:
        return _error_response(e)

    response = CartEditResponse(lines=lines, quote=quote)
    return json_response(response.model_dump(mode="json"))


@csrf_exempt
@require_POST
@idempotency_key_required
def create_order(request: HttpRequest) -> JsonResponse:
    """
    POST /api/orders

    Place an order. Requires Idempotency-Key header.

    Request body: OrderCreateRequest schema
    Response: OrderCreateResponse schema (201); client_secret is set for
    card and iDEAL orders
    """
    body = parse_body(request, OrderCreateRequest)
    if isinstance(body, JsonResponse):
        return body

    try:
        order, client_secret = services.place_order(
            body.lines,
            body.customer,
            body.delivery_type,
            body.payment_method,
            location=body.location,
            store_id=body.store_id,
            notes=body.notes,
        )
    except (NoEligibleStore, StoreClosed, BelowMinimumOrder) as e:
        return _error_response(e)
    except PaymentError as e:
        logger.error("Payment intent creation failed: %s (code=%s)", e.message, e.code)
        return json_response(e.to_dict(), status=502)

    response = OrderCreateResponse(
        order_id=order.pk,
        confirmation_code=order.confirmation_code,
        status=order.current_status,
        payment_method=body.payment_method,
        pricing=order.pricing_snapshot(),
        client_secret=client_secret,
        created_at=order.created_at,
    )
    return json_response(response.model_dump(mode="json"), status=201)


@require_GET
def order_detail(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    GET /api/orders/{order_id}?code=<confirmation_code>

    Full order details, including the frozen pricing snapshot.
    """
    order = _get_customer_order(request, order_id)
    return json_response(OrderDetailResponse.from_order(order).model_dump(mode="json"))


@require_GET
def order_status(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    GET /api/orders/{order_id}/status?code=<confirmation_code>

    Lightweight status for polling from the confirmation page.
    """
    order = _get_customer_order(request, order_id)
    return json_response(OrderStatusResponse.from_order(order).model_dump(mode="json"))


def _apply(
    order: Order,
    operation: Callable[[Order], Order],
) -> JsonResponse:
    try:
        order = operation(order)
    except InvalidTransition as e:
        logger.warning(
            "Rejected transition: order_id=%s status=%s action=%s actor=%s",
            order.pk,
            e.current.value,
            e.action.value,
            e.actor.value,
        )
        return _error_response(e)
    return json_response(OrderDetailResponse.from_order(order).model_dump(mode="json"))


@csrf_exempt
@require_POST
def cancel_order(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    POST /api/orders/{order_id}/cancel?code=<confirmation_code>

    Customer cancellation; allowed until preparation starts.
    """
    return _apply(
        _get_customer_order(request, order_id),
        lambda order: services.cancel_order(order, Actor.CUSTOMER),
    )


@require_POST
@staff_required
def advance_order(request: HttpRequest, order_id: int) -> JsonResponse:
    """POST /api/orders/{order_id}/advance (staff)."""
    return _apply(
        _get_order_or_404(order_id),
        lambda order: services.advance_order(order, user=request.user),
    )


@require_POST
@staff_required
def reject_order(request: HttpRequest, order_id: int) -> JsonResponse:
    """POST /api/orders/{order_id}/reject (staff)."""
    return _apply(
        _get_order_or_404(order_id),
        lambda order: services.reject_order(order, user=request.user),
    )


@require_POST
@staff_required
def cancel_order_admin(request: HttpRequest, order_id: int) -> JsonResponse:
    """POST /api/orders/{order_id}/cancel-admin (staff, any non-terminal status)."""
    return _apply(
        _get_order_or_404(order_id),
        lambda order: services.cancel_order(order, Actor.ADMIN, user=request.user),
    )
