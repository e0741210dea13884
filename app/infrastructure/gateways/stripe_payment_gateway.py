import asyncio
import json
import logging
from typing import Any

import stripe

from app.application.dtos.payment_dto import CheckoutSessionDTO, ProviderSessionDTO
from app.application.interfaces.payment_gateway import PaymentGateway
from app.domain.errors import (
    PaymentProviderError,
    ProviderNotConfiguredError,
    WebhookSignatureError,
)
from app.infrastructure.circuit_breaker import CircuitBreakerError, stripe_breaker

logger = logging.getLogger(__name__)


def construct_verified_event(
    payload: bytes,
    signature_header: str | None,
    webhook_secret: str | None,
) -> dict[str, Any]:
    """
    Verifica la firma Stripe-Signature y devuelve el evento como dict.

    Sin secreto configurado no se acepta ningún webhook.
    """
    if not webhook_secret:
        raise ProviderNotConfiguredError("STRIPE_WEBHOOK_SECRET")
    if not signature_header:
        raise WebhookSignatureError("Missing Stripe-Signature header")
    try:
        stripe.Webhook.construct_event(
            payload=payload.decode(),
            sig_header=signature_header,
            secret=webhook_secret,
        )
    except stripe.SignatureVerificationError as exc:
        raise WebhookSignatureError("Invalid Stripe signature") from exc
    except ValueError as exc:
        raise WebhookSignatureError("Invalid Stripe webhook payload") from exc

    # construct_event ya validó firma y JSON
    return json.loads(payload)


class StripePaymentGateway(PaymentGateway):
    """
    Stripe Checkout detrás del circuit breaker.

    Usa un StripeClient propio (sin estado global del SDK). El SDK es
    síncrono: cada llamada corre en un thread con asyncio.wait_for como
    límite de tiempo. No hay reintentos automáticos.
    """

    def __init__(
        self,
        api_key: str | None,
        timeout_seconds: float = 10.0,
        client: stripe.StripeClient | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        if client is None and api_key:
            client = stripe.StripeClient(
                api_key,
                http_client=stripe.RequestsClient(timeout=timeout_seconds),
                max_network_retries=0,
            )
        self._client = client

    async def create_checkout_session(
        self,
        amount_minor: int,
        currency: str,
        description: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionDTO:
        client = self._require_client()
        session = await self._call(
            client.checkout.sessions.create,
            params={
                "mode": "payment",
                "payment_method_types": ["card"],
                "line_items": [
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": {"name": description},
                            "unit_amount": amount_minor,
                        },
                        "quantity": 1,
                    }
                ],
                "metadata": metadata,
                "success_url": success_url,
                "cancel_url": cancel_url,
            },
        )
        return CheckoutSessionDTO(session_id=session["id"], url=session.get("url"))

    async def retrieve_session(self, session_id: str) -> ProviderSessionDTO:
        client = self._require_client()
        session = await self._call(client.checkout.sessions.retrieve, session_id)
        intent = session.get("payment_intent")
        if isinstance(intent, dict):
            intent = intent.get("id")
        return ProviderSessionDTO(
            session_id=session["id"],
            payment_status=session.get("payment_status") or "unpaid",
            payment_intent_id=intent,
        )

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str | None,
    ) -> dict[str, Any]:
        return construct_verified_event(payload, signature_header, webhook_secret)

    def _require_client(self) -> stripe.StripeClient:
        if self._client is None:
            raise ProviderNotConfiguredError("STRIPE_SECRET_KEY")
        return self._client

    async def _call(self, fn, *args, **kwargs):
        operation = getattr(fn, "__qualname__", str(fn))
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(stripe_breaker.call, fn, *args, **kwargs),
                timeout=self._timeout_seconds,
            )
        except CircuitBreakerError as exc:
            logger.error("Stripe circuit breaker is open - service unavailable")
            raise PaymentProviderError(
                "Payment provider temporarily unavailable", code="PAYMENT_PROVIDER_UNAVAILABLE"
            ) from exc
        except asyncio.TimeoutError as exc:
            logger.error("Stripe call timed out", extra={"operation": operation})
            raise PaymentProviderError(
                "Payment provider timed out", code="PAYMENT_PROVIDER_TIMEOUT"
            ) from exc
        except stripe.StripeError as exc:
            logger.error("Stripe API error", exc_info=exc, extra={"operation": operation})
            raise PaymentProviderError(exc.user_message or str(exc)) from exc
