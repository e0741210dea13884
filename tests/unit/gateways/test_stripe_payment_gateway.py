import json
import time
import unittest
from unittest.mock import MagicMock, patch

import stripe

from app.domain.errors import (
    PaymentProviderError,
    ProviderNotConfiguredError,
    WebhookSignatureError,
)
from app.infrastructure.circuit_breaker import stripe_breaker
from app.infrastructure.gateways.stripe_payment_gateway import (
    StripePaymentGateway,
    construct_verified_event,
)
from tests.conftest import checkout_event, sign_payload


class TestStripePaymentGateway(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        stripe_breaker.close()
        self.client = MagicMock()
        self.gateway = StripePaymentGateway(api_key=None, timeout_seconds=1.0, client=self.client)

    def tearDown(self):
        stripe_breaker.close()

    async def test_create_checkout_session(self):
        self.client.checkout.sessions.create.return_value = {
            "id": "cs_test_123",
            "url": "https://checkout.stripe.com/c/pay/cs_test_123",
        }

        result = await self.gateway.create_checkout_session(
            amount_minor=300000,
            currency="lkr",
            description="Instrument rental for booking b-1",
            metadata={"bookingId": "b-1", "paymentType": "rental"},
            success_url="http://frontend.test/payment?success=true&bookingId=b-1",
            cancel_url="http://frontend.test/payment?canceled=true&bookingId=b-1",
        )

        self.assertEqual(result.session_id, "cs_test_123")
        self.assertEqual(result.url, "https://checkout.stripe.com/c/pay/cs_test_123")

        _, kwargs = self.client.checkout.sessions.create.call_args
        params = kwargs["params"]
        self.assertEqual(params["mode"], "payment")
        self.assertEqual(params["metadata"], {"bookingId": "b-1", "paymentType": "rental"})
        line_item = params["line_items"][0]
        self.assertEqual(line_item["quantity"], 1)
        self.assertEqual(line_item["price_data"]["unit_amount"], 300000)
        self.assertEqual(line_item["price_data"]["currency"], "lkr")

    async def test_retrieve_session(self):
        self.client.checkout.sessions.retrieve.return_value = {
            "id": "cs_test_123",
            "payment_status": "paid",
            "payment_intent": {"id": "pi_123", "object": "payment_intent"},
        }

        result = await self.gateway.retrieve_session("cs_test_123")

        self.client.checkout.sessions.retrieve.assert_called_once_with("cs_test_123")
        self.assertTrue(result.is_paid)
        self.assertEqual(result.payment_intent_id, "pi_123")

    async def test_unpaid_session(self):
        self.client.checkout.sessions.retrieve.return_value = {
            "id": "cs_test_123",
            "payment_status": "unpaid",
            "payment_intent": None,
        }

        result = await self.gateway.retrieve_session("cs_test_123")

        self.assertFalse(result.is_paid)
        self.assertEqual(result.payment_status, "unpaid")
        self.assertIsNone(result.payment_intent_id)

    async def test_stripe_error_is_mapped(self):
        self.client.checkout.sessions.retrieve.side_effect = stripe.APIConnectionError(
            "Network down"
        )

        with self.assertRaises(PaymentProviderError) as ctx:
            await self.gateway.retrieve_session("cs_test_123")

        self.assertEqual(ctx.exception.code, "PAYMENT_PROVIDER_ERROR")

    async def test_timeout_is_mapped(self):
        def slow_retrieve(session_id):
            time.sleep(0.3)
            return {"id": session_id, "payment_status": "paid"}

        self.client.checkout.sessions.retrieve.side_effect = slow_retrieve
        gateway = StripePaymentGateway(api_key=None, timeout_seconds=0.05, client=self.client)

        with self.assertRaises(PaymentProviderError) as ctx:
            await gateway.retrieve_session("cs_test_123")

        self.assertEqual(ctx.exception.code, "PAYMENT_PROVIDER_TIMEOUT")

    async def test_circuit_opens_after_repeated_failures(self):
        self.client.checkout.sessions.retrieve.side_effect = stripe.APIConnectionError(
            "Network down"
        )

        for _ in range(stripe_breaker.fail_max):
            with self.assertRaises(PaymentProviderError):
                await self.gateway.retrieve_session("cs_test_123")

        with self.assertRaises(PaymentProviderError) as ctx:
            await self.gateway.retrieve_session("cs_test_123")

        self.assertEqual(ctx.exception.code, "PAYMENT_PROVIDER_UNAVAILABLE")
        self.assertEqual(
            self.client.checkout.sessions.retrieve.call_count, stripe_breaker.fail_max
        )

    async def test_invalid_requests_do_not_open_circuit(self):
        self.client.checkout.sessions.retrieve.side_effect = stripe.InvalidRequestError(
            "No such checkout.session: cs_missing", "id"
        )

        for _ in range(stripe_breaker.fail_max + 1):
            with self.assertRaises(PaymentProviderError):
                await self.gateway.retrieve_session("cs_missing")

        self.assertEqual(stripe_breaker.current_state, "closed")

    async def test_missing_api_key(self):
        gateway = StripePaymentGateway(api_key=None)

        with self.assertRaises(ProviderNotConfiguredError):
            await gateway.retrieve_session("cs_test_123")

    @patch("stripe.RequestsClient")
    @patch("stripe.StripeClient")
    async def test_builds_client_without_retries(self, mock_client_cls, mock_http_cls):
        StripePaymentGateway(api_key="sk_test_123", timeout_seconds=7.0)

        mock_http_cls.assert_called_once_with(timeout=7.0)
        args, kwargs = mock_client_cls.call_args
        self.assertEqual(args[0], "sk_test_123")
        self.assertEqual(kwargs["max_network_retries"], 0)
        self.assertIs(kwargs["http_client"], mock_http_cls.return_value)


class TestWebhookVerification(unittest.TestCase):
    secret = "whsec_unit"

    def setUp(self):
        self.payload = checkout_event("evt_1", "b-1", "cs_test_123")

    def test_valid_signature_returns_event(self):
        event = construct_verified_event(
            self.payload.encode(), sign_payload(self.payload, self.secret), self.secret
        )

        self.assertEqual(event, json.loads(self.payload))
        self.assertEqual(event["data"]["object"]["metadata"]["bookingId"], "b-1")

    def test_wrong_secret(self):
        with self.assertRaises(WebhookSignatureError):
            construct_verified_event(
                self.payload.encode(), sign_payload(self.payload, "whsec_other"), self.secret
            )

    def test_tampered_payload(self):
        header = sign_payload(self.payload, self.secret)
        tampered = self.payload.replace("b-1", "b-2")

        with self.assertRaises(WebhookSignatureError):
            construct_verified_event(tampered.encode(), header, self.secret)

    def test_stale_timestamp(self):
        header = sign_payload(self.payload, self.secret, timestamp=int(time.time()) - 3600)

        with self.assertRaises(WebhookSignatureError):
            construct_verified_event(self.payload.encode(), header, self.secret)

    def test_missing_header(self):
        with self.assertRaises(WebhookSignatureError):
            construct_verified_event(self.payload.encode(), None, self.secret)

    def test_missing_secret(self):
        with self.assertRaises(ProviderNotConfiguredError):
            construct_verified_event(
                self.payload.encode(), sign_payload(self.payload, self.secret), None
            )
