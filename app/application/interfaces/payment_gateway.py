from typing import Any

from app.application.dtos.payment_dto import CheckoutSessionDTO, ProviderSessionDTO


class PaymentGateway:
    async def create_checkout_session(
        self,
        amount_minor: int,
        currency: str,
        description: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionDTO:
        raise NotImplementedError

    async def retrieve_session(self, session_id: str) -> ProviderSessionDTO:
        raise NotImplementedError

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str | None,
    ) -> dict[str, Any]:
        raise NotImplementedError
