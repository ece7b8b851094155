"""
Stripe webhook handlers.

Handles payment events from Stripe:
- payment_intent.succeeded: Payment completed, confirm the order
- payment_intent.payment_failed: Payment failed, order stays pending
"""

import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

import stripe

from apps.web.orders.models import Order
from apps.web.orders.services import confirm_payment, record_payment_failure

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Handle Stripe webhook events.

    POST /payments/webhooks/stripe

    Events handled:
    - payment_intent.succeeded: Order confirmed
    - payment_intent.payment_failed: Payment failed
    """
    payload = request.body
    sig_header = request.headers.get("Stripe-Signature", "")

    # Verify webhook signature
    try:
        event = stripe.Webhook.construct_event(
            payload,
            sig_header,
            settings.STRIPE_WEBHOOK_SECRET,
        )
    except ValueError as e:
        logger.warning("Invalid Stripe webhook payload: %s", e)
        return HttpResponse("Invalid payload", status=400)
    except stripe.SignatureVerificationError as e:
        logger.warning("Invalid Stripe webhook signature: %s", e)
        return HttpResponse("Invalid signature", status=400)

    logger.info("Received Stripe event: %s", event["type"])

    match event["type"]:
        case "payment_intent.succeeded":
            _handle_payment_succeeded(event["data"]["object"])
        case "payment_intent.payment_failed":
            _handle_payment_failed(event["data"]["object"])
        case _:
            logger.debug("Ignoring unhandled Stripe event: %s", event["type"])

    return HttpResponse(status=200)


def _order_for_intent(payment_intent: dict[str, object]) -> Order | None:
    """Look up the order referenced by a PaymentIntent's metadata."""
    metadata = payment_intent.get("metadata", {})
    if not isinstance(metadata, dict):
        return None

    order_id = metadata.get("order_id")
    if not order_id:
        logger.warning(
            "Payment event without order_id in metadata: %s",
            payment_intent.get("id"),
        )
        return None

    try:
        return Order.objects.get(pk=int(order_id))
    except Order.DoesNotExist:
        logger.error("Order not found for payment_intent: order_id=%s", order_id)
    except (ValueError, TypeError):
        logger.error("Invalid order_id in metadata: %s", order_id)
    return None


def _handle_payment_succeeded(payment_intent: dict[str, object]) -> None:
    """
    Record the payment and confirm the order.

    Args:
        payment_intent: Stripe PaymentIntent data from webhook
    """
    order = _order_for_intent(payment_intent)
    if order is None:
        return

    order = confirm_payment(order)
    logger.info(
        "Payment succeeded: order_id=%s confirmation_code=%s status=%s",
        order.pk,
        order.confirmation_code,
        order.status,
    )


def _handle_payment_failed(payment_intent: dict[str, object]) -> None:
    """
    Mark the order's payment as failed.

    Args:
        payment_intent: Stripe PaymentIntent data from webhook
    """
    order = _order_for_intent(payment_intent)
    if order is None:
        return

    reason = ""
    last_error = payment_intent.get("last_payment_error")
    if isinstance(last_error, dict):
        reason = str(last_error.get("message", ""))

    record_payment_failure(order, reason)
