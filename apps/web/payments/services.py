"""
Payment services - Stripe integration.

Provides functions for creating and managing Stripe PaymentIntents for
card and iDEAL orders. Cash orders never reach Stripe.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from django.conf import settings

import stripe
from storefront_schemas import PaymentMethod

logger = logging.getLogger(__name__)

# Configure Stripe API key
stripe.api_key = settings.STRIPE_SECRET_KEY

DEFAULT_CURRENCY = "eur"


class PaymentError(Exception):
    """Error during payment processing."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"error": "payment_failed", "message": self.message, "code": self.code}


def _payment_error(e: stripe.StripeError) -> PaymentError:
    return PaymentError(
        message=str(e.user_message or e),
        code=getattr(e, "code", None),
    )


def to_cents(amount: Decimal) -> int:
    """Convert a euro amount to integer cents, rounding half up."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def create_payment_intent(
    amount: Decimal,
    payment_method: PaymentMethod,
    currency: str = DEFAULT_CURRENCY,
    metadata: dict[str, Any] | None = None,
) -> stripe.PaymentIntent:
    """
    Create a Stripe PaymentIntent for the order.

    Args:
        amount: Amount in euros (will be converted to cents)
        payment_method: card or ideal; selects the Stripe payment method type
        currency: Currency code (default: EUR)
        metadata: Additional metadata to attach to the payment (e.g., order_id)

    Returns:
        stripe.PaymentIntent with client_secret for frontend

    Raises:
        PaymentError: If the method is not an online method or the Stripe
            API call fails
    """
    if not payment_method.is_online:
        raise PaymentError(
            message=f"{payment_method.value} payments are not processed online",
            code="unsupported_payment_method",
        )

    try:
        return stripe.PaymentIntent.create(
            amount=to_cents(amount),
            currency=currency,
            payment_method_types=[payment_method.value],
            metadata=metadata or {},
        )
    except stripe.StripeError as e:
        raise _payment_error(e) from e


def retrieve_payment_intent(payment_intent_id: str) -> stripe.PaymentIntent:
    """
    Retrieve a PaymentIntent from Stripe.

    Args:
        payment_intent_id: The Stripe PaymentIntent ID (pi_xxx)

    Returns:
        stripe.PaymentIntent with current status

    Raises:
        PaymentError: If PaymentIntent not found or API call fails
    """
    try:
        return stripe.PaymentIntent.retrieve(payment_intent_id)
    except stripe.StripeError as e:
        raise _payment_error(e) from e


def create_refund(
    payment_intent_id: str,
    amount_cents: int | None = None,
    reason: str = "requested_by_customer",
) -> stripe.Refund:
    """
    Refund a captured payment.

    Args:
        payment_intent_id: The Stripe PaymentIntent ID to refund
        amount_cents: Amount to refund in cents (None = full refund)
        reason: "duplicate", "fraudulent" or "requested_by_customer"

    Raises:
        PaymentError: If refund fails
    """
    params: dict[str, Any] = {
        "payment_intent": payment_intent_id,
        "reason": reason,
    }
    if amount_cents is not None:
        params["amount"] = amount_cents

    try:
        return stripe.Refund.create(**params)
    except stripe.StripeError as e:
        raise _payment_error(e) from e


def cancel_payment_intent(payment_intent_id: str) -> stripe.PaymentIntent:
    """
    Cancel a PaymentIntent that has not been paid yet.

    Raises:
        PaymentError: If cancellation fails
    """
    try:
        intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        result: stripe.PaymentIntent = intent.cancel()
        return result
    except stripe.StripeError as e:
        raise _payment_error(e) from e
