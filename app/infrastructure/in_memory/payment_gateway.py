from typing import Any
from uuid import uuid4

from app.application.dtos.payment_dto import CheckoutSessionDTO, ProviderSessionDTO
from app.application.interfaces.payment_gateway import PaymentGateway
from app.domain.errors import PaymentProviderError
from app.infrastructure.gateways.stripe_payment_gateway import construct_verified_event


class StubPaymentGateway(PaymentGateway):
    """
    Proveedor en memoria para desarrollo y tests.

    Las sesiones nacen "unpaid"; mark_session_paid simula que el cliente
    completó el checkout. fail_next hace fallar la próxima llamada.
    La verificación de firma de webhooks es la real de Stripe.
    """

    def __init__(self, checkout_base_url: str = "https://checkout.stripe.test/pay") -> None:
        self._checkout_base_url = checkout_base_url
        self.sessions: dict[str, dict[str, Any]] = {}
        self._next_error: PaymentProviderError | None = None

    def fail_next(self, error: PaymentProviderError | None = None) -> None:
        self._next_error = error or PaymentProviderError("Stub provider unavailable")

    def mark_session_paid(self, session_id: str, payment_intent_id: str | None = None) -> None:
        session = self.sessions[session_id]
        session["payment_status"] = "paid"
        session["payment_intent"] = payment_intent_id or f"pi_{uuid4().hex[:14]}"

    async def create_checkout_session(
        self,
        amount_minor: int,
        currency: str,
        description: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionDTO:
        self._raise_pending_error()
        session_id = f"cs_test_{uuid4().hex[:24]}"
        self.sessions[session_id] = {
            "id": session_id,
            "amount_total": amount_minor,
            "currency": currency,
            "description": description,
            "metadata": dict(metadata),
            "payment_status": "unpaid",
            "payment_intent": None,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        return CheckoutSessionDTO(session_id=session_id, url=f"{self._checkout_base_url}/{session_id}")

    async def retrieve_session(self, session_id: str) -> ProviderSessionDTO:
        self._raise_pending_error()
        session = self.sessions.get(session_id)
        if session is None:
            raise PaymentProviderError(f"No such checkout session: {session_id}", code="INVALID_SESSION")
        return ProviderSessionDTO(
            session_id=session_id,
            payment_status=session["payment_status"],
            payment_intent_id=session["payment_intent"],
        )

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str | None,
    ) -> dict[str, Any]:
        return construct_verified_event(payload, signature_header, webhook_secret)

    def _raise_pending_error(self) -> None:
        if self._next_error is not None:
            error, self._next_error = self._next_error, None
            raise error
