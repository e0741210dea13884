from collections.abc import Sequence
from datetime import datetime

from app.domain.entities.payment import Payment, PaymentKey, PaymentStatus, PaymentType


class PaymentRepo:
    async def open_payment(self, draft: Payment) -> Payment:
        """
        Upsert por (booking_id, user_id, type). Si existe una entrada
        pendiente o fallida la sobrescribe con el borrador (nueva sesión,
        status pending); si ya está cobrada lanza PaymentAlreadySettledError.
        """
        raise NotImplementedError

    async def get_by_key(self, key: PaymentKey) -> Payment | None:
        raise NotImplementedError

    async def mark_succeeded(
        self,
        key: PaymentKey,
        provider_intent_id: str | None,
        paid_at: datetime,
    ) -> Payment | None:
        """Transición idempotente a succeeded; None si no hay entrada para la clave."""
        raise NotImplementedError

    async def mark_failed(self, key: PaymentKey, at: datetime) -> Payment | None:
        raise NotImplementedError

    async def list_by_user(
        self,
        user_id: str,
        payment_type: PaymentType | None = None,
    ) -> Sequence[Payment]:
        raise NotImplementedError

    async def list_all(
        self,
        payment_type: PaymentType | None = None,
        status: PaymentStatus | None = None,
    ) -> Sequence[Payment]:
        raise NotImplementedError
