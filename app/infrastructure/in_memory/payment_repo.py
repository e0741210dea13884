import asyncio
from collections.abc import Sequence
from datetime import datetime

from app.application.interfaces.payment_repo import PaymentRepo
from app.domain.entities.payment import Payment, PaymentKey, PaymentStatus, PaymentType
from app.domain.errors import PaymentAlreadySettledError


class InMemoryPaymentRepo(PaymentRepo):
    """Libro de pagos en memoria indexado por (booking_id, user_id, type)."""

    def __init__(self) -> None:
        self.payments: dict[PaymentKey, Payment] = {}
        self._lock = asyncio.Lock()

    async def open_payment(self, draft: Payment) -> Payment:
        async with self._lock:
            existing = self.payments.get(draft.key)
            if existing is None:
                self.payments[draft.key] = draft
                return draft
            if existing.is_successful:
                raise PaymentAlreadySettledError(draft.booking_id, draft.type.value)
            reopened = existing.reopen(draft)
            self.payments[draft.key] = reopened
            return reopened

    async def get_by_key(self, key: PaymentKey) -> Payment | None:
        return self.payments.get(key)

    async def mark_succeeded(
        self,
        key: PaymentKey,
        provider_intent_id: str | None,
        paid_at: datetime,
    ) -> Payment | None:
        async with self._lock:
            payment = self.payments.get(key)
            if payment is None:
                return None
            self.payments[key] = payment.mark_succeeded(provider_intent_id, paid_at)
            return self.payments[key]

    async def mark_failed(self, key: PaymentKey, at: datetime) -> Payment | None:
        async with self._lock:
            payment = self.payments.get(key)
            if payment is None:
                return None
            self.payments[key] = payment.mark_failed(at)
            return self.payments[key]

    async def list_by_user(
        self,
        user_id: str,
        payment_type: PaymentType | None = None,
    ) -> Sequence[Payment]:
        return self._sorted(
            p
            for p in self.payments.values()
            if p.user_id == user_id and (payment_type is None or p.type == payment_type)
        )

    async def list_all(
        self,
        payment_type: PaymentType | None = None,
        status: PaymentStatus | None = None,
    ) -> Sequence[Payment]:
        return self._sorted(
            p
            for p in self.payments.values()
            if (payment_type is None or p.type == payment_type)
            and (status is None or p.status == status)
        )

    @staticmethod
    def _sorted(payments) -> list[Payment]:
        return sorted(payments, key=lambda p: (p.created_at is not None, p.created_at), reverse=True)
