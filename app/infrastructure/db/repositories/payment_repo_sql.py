from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.payment_repo import PaymentRepo
from app.domain.entities.payment import Payment, PaymentKey, PaymentStatus, PaymentType
from app.domain.errors import PaymentAlreadySettledError
from app.infrastructure.db.tables import payments


class PaymentRepoSQL(PaymentRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def open_payment(self, draft: Payment) -> Payment:
        existing = await self._get_for_update(draft.key)
        if existing is None:
            try:
                async with self._session.begin_nested():
                    await self._session.execute(insert(payments).values(**self._to_row(draft)))
                return draft
            except IntegrityError:
                # Otro checkout insertó la misma clave en paralelo
                existing = await self._get_for_update(draft.key)
                if existing is None:
                    raise

        if existing.is_successful:
            raise PaymentAlreadySettledError(draft.booking_id, draft.type.value)
        reopened = existing.reopen(draft)
        values = self._to_row(reopened)
        values.pop("id")
        stmt = (
            update(payments)
            .where(
                payments.c.id == existing.id,
                payments.c.status != PaymentStatus.SUCCEEDED.value,
            )
            .values(**values)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise PaymentAlreadySettledError(draft.booking_id, draft.type.value)
        return reopened

    async def get_by_key(self, key: PaymentKey) -> Payment | None:
        result = await self._session.execute(self._by_key(key))
        row = result.mappings().first()
        return self._map_payment(row) if row else None

    async def mark_succeeded(
        self,
        key: PaymentKey,
        provider_intent_id: str | None,
        paid_at: datetime,
    ) -> Payment | None:
        payment = await self.get_by_key(key)
        if payment is None:
            return None
        return await self._transition(payment, payment.mark_succeeded(provider_intent_id, paid_at))

    async def mark_failed(self, key: PaymentKey, at: datetime) -> Payment | None:
        payment = await self.get_by_key(key)
        if payment is None:
            return None
        return await self._transition(payment, payment.mark_failed(at))

    async def list_by_user(
        self,
        user_id: str,
        payment_type: PaymentType | None = None,
    ) -> Sequence[Payment]:
        stmt = select(payments).where(payments.c.user_id == user_id)
        if payment_type is not None:
            stmt = stmt.where(payments.c.type == PaymentType(payment_type).value)
        return await self._fetch_all(stmt)

    async def list_all(
        self,
        payment_type: PaymentType | None = None,
        status: PaymentStatus | None = None,
    ) -> Sequence[Payment]:
        stmt = select(payments)
        if payment_type is not None:
            stmt = stmt.where(payments.c.type == PaymentType(payment_type).value)
        if status is not None:
            stmt = stmt.where(payments.c.status == PaymentStatus(status).value)
        return await self._fetch_all(stmt)

    async def _transition(self, current: Payment, target: Payment) -> Payment | None:
        if target is current:
            return current
        stmt = (
            update(payments)
            .where(
                payments.c.id == current.id,
                payments.c.status == current.status.value,
            )
            .values(
                status=target.status.value,
                provider_intent_id=target.provider_intent_id,
                paid_at=target.paid_at,
                updated_at=target.updated_at,
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 1:
            return target

        # Otra transacción cambió el status: se re-aplica la transición sobre el valor fresco
        fresh = await self.get_by_key(current.key)
        if fresh is None:
            return None
        if target.status == PaymentStatus.SUCCEEDED:
            retried = fresh.mark_succeeded(target.provider_intent_id, target.paid_at)
        else:
            retried = fresh.mark_failed(target.updated_at)
        return await self._transition(fresh, retried)

    async def _get_for_update(self, key: PaymentKey) -> Payment | None:
        result = await self._session.execute(self._by_key(key).with_for_update())
        row = result.mappings().first()
        return self._map_payment(row) if row else None

    async def _fetch_all(self, stmt) -> list[Payment]:
        stmt = stmt.order_by(payments.c.created_at.desc(), payments.c.id)
        result = await self._session.execute(stmt)
        return [self._map_payment(row) for row in result.mappings().all()]

    def _by_key(self, key: PaymentKey):
        return (
            select(payments)
            .where(
                payments.c.booking_id == key.booking_id,
                payments.c.user_id == key.user_id,
                payments.c.type == key.type.value,
            )
            .limit(1)
        )

    def _to_row(self, payment: Payment) -> dict:
        return {
            "id": payment.id,
            "booking_id": payment.booking_id,
            "user_id": payment.user_id,
            "type": payment.type.value,
            "amount": payment.amount,
            "display_amount": payment.display_amount,
            "currency": payment.currency,
            "commission": payment.commission,
            "owner_payout": payment.owner_payout,
            "provider_session_id": payment.provider_session_id,
            "provider_intent_id": payment.provider_intent_id,
            "status": payment.status.value,
            "paid_at": payment.paid_at,
            "created_at": payment.created_at,
            "updated_at": payment.updated_at,
        }

    def _map_payment(self, row) -> Payment:
        return Payment(
            id=row["id"],
            booking_id=row["booking_id"],
            user_id=row["user_id"],
            type=row["type"],
            amount=row["amount"],
            display_amount=row["display_amount"],
            currency=row["currency"],
            commission=row["commission"],
            owner_payout=row["owner_payout"],
            provider_session_id=row.get("provider_session_id"),
            provider_intent_id=row.get("provider_intent_id"),
            status=row["status"],
            paid_at=row.get("paid_at"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
