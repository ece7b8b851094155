"""Tests for Stripe webhook handlers."""

import json
from unittest.mock import patch

from django.test import Client, TestCase, override_settings

import stripe
from storefront_schemas import Actor, OrderStatus, PaymentMethod, PaymentStatus

from apps.web.orders.models import OrderStatusChange
from apps.web.orders.tests.factories import OrderFactory


def _event(event_type: str, data: dict) -> dict:
    return {"type": event_type, "data": {"object": data}}


@override_settings(STRIPE_WEBHOOK_SECRET="whsec_test123")
class TestStripeWebhook(TestCase):
    """Tests for the Stripe webhook endpoint."""

    def setUp(self):
        self.http_client = Client()
        self.url = "/payments/webhooks/stripe"

    def _make_webhook_request(self, event_type: str, data: dict, signature: str = "valid"):
        """Helper to make webhook requests."""
        return self.http_client.post(
            self.url,
            data=json.dumps(_event(event_type, data)),
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=signature,
        )

    def _card_order(self, **kwargs):
        return OrderFactory(
            payment_method=PaymentMethod.CARD.value,
            stripe_payment_intent_id="pi_test123",
            **kwargs,
        )

    @patch("stripe.Webhook.construct_event")
    def test_payment_succeeded_confirms_order(self, mock_construct):
        """Test that payment_intent.succeeded confirms a pending order."""
        order = self._card_order()
        data = {"id": "pi_test123", "metadata": {"order_id": str(order.pk)}}
        mock_construct.return_value = _event("payment_intent.succeeded", data)

        response = self._make_webhook_request("payment_intent.succeeded", data)

        assert response.status_code == 200

        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED.value
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.confirmed_at is not None

        change = OrderStatusChange.objects.get(order=order)
        assert change.from_status == OrderStatus.PENDING.value
        assert change.to_status == OrderStatus.CONFIRMED.value
        assert change.actor == Actor.SYSTEM.value

    @patch("stripe.Webhook.construct_event")
    def test_payment_succeeded_idempotent(self, mock_construct):
        """Test that processing the same webhook twice is idempotent."""
        order = self._card_order()
        data = {"id": "pi_test123", "metadata": {"order_id": str(order.pk)}}
        mock_construct.return_value = _event("payment_intent.succeeded", data)

        self._make_webhook_request("payment_intent.succeeded", data)
        response = self._make_webhook_request("payment_intent.succeeded", data)

        assert response.status_code == 200
        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED.value
        assert OrderStatusChange.objects.filter(order=order).count() == 1

    @patch("stripe.Webhook.construct_event")
    def test_payment_succeeded_after_staff_accepted(self, mock_construct):
        """Test that a late payment event only records the payment."""
        order = self._card_order(status=OrderStatus.PREPARING.value)
        data = {"id": "pi_test123", "metadata": {"order_id": str(order.pk)}}
        mock_construct.return_value = _event("payment_intent.succeeded", data)

        response = self._make_webhook_request("payment_intent.succeeded", data)

        assert response.status_code == 200
        order.refresh_from_db()
        assert order.status == OrderStatus.PREPARING.value
        assert order.payment_status == PaymentStatus.PAID.value

    @patch("apps.web.payments.services.stripe.Refund.create")
    @patch("stripe.Webhook.construct_event")
    def test_payment_succeeded_after_cancellation_refunds(self, mock_construct, mock_refund):
        """Test that a payment for a cancelled order is refunded."""
        order = self._card_order(status=OrderStatus.CANCELLED.value)
        data = {"id": "pi_test123", "metadata": {"order_id": str(order.pk)}}
        mock_construct.return_value = _event("payment_intent.succeeded", data)

        response = self._make_webhook_request("payment_intent.succeeded", data)

        assert response.status_code == 200
        mock_refund.assert_called_once_with(
            payment_intent="pi_test123",
            reason="requested_by_customer",
        )
        order.refresh_from_db()
        assert order.status == OrderStatus.CANCELLED.value
        assert order.payment_status == PaymentStatus.REFUNDED.value

    @patch("stripe.Webhook.construct_event")
    def test_payment_failed_updates_order(self, mock_construct):
        """Test that payment_intent.payment_failed updates payment status."""
        order = self._card_order()
        data = {
            "id": "pi_test123",
            "metadata": {"order_id": str(order.pk)},
            "last_payment_error": {"message": "Card declined"},
        }
        mock_construct.return_value = _event("payment_intent.payment_failed", data)

        with self.assertLogs("apps.web.orders.services", level="INFO") as logs:
            response = self._make_webhook_request("payment_intent.payment_failed", data)

        assert response.status_code == 200
        assert "Card declined" in logs.output[0]

        order.refresh_from_db()
        assert order.payment_status == PaymentStatus.FAILED.value
        assert order.status == OrderStatus.PENDING.value  # Order status unchanged

    @patch("stripe.Webhook.construct_event")
    def test_missing_order_id_in_metadata(self, mock_construct):
        """Test handling of webhook without order_id in metadata."""
        data = {"id": "pi_test123", "metadata": {}}
        mock_construct.return_value = _event("payment_intent.succeeded", data)

        response = self._make_webhook_request("payment_intent.succeeded", data)

        # Processed, just not acted upon
        assert response.status_code == 200

    @patch("stripe.Webhook.construct_event")
    def test_nonexistent_order_id(self, mock_construct):
        """Test handling of webhook with non-existent order ID."""
        data = {"id": "pi_test123", "metadata": {"order_id": "999999"}}
        mock_construct.return_value = _event("payment_intent.succeeded", data)

        response = self._make_webhook_request("payment_intent.succeeded", data)

        # Don't make Stripe retry for unknown orders
        assert response.status_code == 200

    @patch("stripe.Webhook.construct_event")
    def test_invalid_order_id(self, mock_construct):
        data = {"id": "pi_test123", "metadata": {"order_id": "ORD-ABC"}}
        mock_construct.return_value = _event("payment_intent.payment_failed", data)

        response = self._make_webhook_request("payment_intent.payment_failed", data)

        assert response.status_code == 200

    @patch("stripe.Webhook.construct_event")
    def test_unhandled_event_type(self, mock_construct):
        """Test that unhandled event types return 200."""
        data = {"id": "cus_test123"}
        mock_construct.return_value = _event("customer.created", data)

        response = self._make_webhook_request("customer.created", data)

        assert response.status_code == 200

    def test_invalid_payload_returns_400(self):
        """Test that an unsigned, invalid body returns 400."""
        response = self.http_client.post(
            self.url,
            data="not valid json",
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE="test_sig",
        )

        assert response.status_code == 400

    @patch("stripe.Webhook.construct_event")
    def test_invalid_signature_returns_400(self, mock_construct):
        """Test that invalid signature returns 400."""
        mock_construct.side_effect = stripe.SignatureVerificationError(
            "Invalid signature", "sig"
        )

        response = self._make_webhook_request(
            "payment_intent.succeeded",
            {"id": "pi_test123"},
            signature="invalid_signature",
        )

        assert response.status_code == 400

    def test_get_not_allowed(self):
        assert self.http_client.get(self.url).status_code == 405
