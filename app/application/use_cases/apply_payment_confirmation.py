import logging

from app.application.dtos.payment_dto import PaymentConfirmationDTO
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_access import require_booking
from app.domain.entities.payment import PaymentKey, PaymentType
from app.domain.errors import OptimisticLockError


class ApplyPaymentConfirmationUseCase:
    """
    Aplica un cobro confirmado por el proveedor a la reserva y al libro.

    Es la única operación que marca una reserva como pagada; la usan el
    webhook y la sincronización manual. Es idempotente por event_id y por
    tipo de pago ya cobrado. La escritura de la reserva es un
    compare-and-swap sobre version: si otro proceso ganó la carrera y ya
    aplicó el cobro, la llamada termina sin cambios.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_repo: PaymentRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_repo = payment_repo
        self._tx = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        booking_id: str,
        payment_type: PaymentType,
        event_id: str,
        provider_intent_id: str | None = None,
    ) -> PaymentConfirmationDTO:
        payment_type = PaymentType(payment_type)
        try:
            async with self._tx.start():
                return await self._apply(booking_id, payment_type, event_id, provider_intent_id)
        except OptimisticLockError:
            async with self._tx.start():
                booking = await require_booking(self._booking_repo, booking_id)
                if booking.is_payment_settled(payment_type, event_id):
                    self._logger.warning(
                        "Payment confirmation lost the race; already applied",
                        extra={"booking_id": booking_id, "event_id": event_id},
                    )
                    payment = await self._payment_repo.get_by_key(
                        PaymentKey(booking.id, booking.renter_id, payment_type)
                    )
                    return PaymentConfirmationDTO(booking=booking, payment=payment, applied=False)
            raise

    async def _apply(
        self,
        booking_id: str,
        payment_type: PaymentType,
        event_id: str,
        provider_intent_id: str | None,
    ) -> PaymentConfirmationDTO:
        booking = await require_booking(self._booking_repo, booking_id)
        key = PaymentKey(booking_id=booking.id, user_id=booking.renter_id, type=payment_type)

        if booking.is_payment_settled(payment_type, event_id):
            self._logger.info(
                "Payment already applied; skipping",
                extra={
                    "booking_id": booking.id,
                    "event_id": event_id,
                    "payment_type": payment_type.value,
                },
            )
            payment = await self._payment_repo.get_by_key(key)
            return PaymentConfirmationDTO(booking=booking, payment=payment, applied=False)

        now = self._clock.now()
        updated = booking.confirm_payment(
            payment_type, event_id=event_id, at=now, provider_intent_id=provider_intent_id
        )
        saved = await self._booking_repo.update(updated, expected_version=booking.version)
        payment = await self._payment_repo.mark_succeeded(
            key, provider_intent_id=provider_intent_id, paid_at=now
        )
        if payment is None:
            self._logger.warning(
                "No ledger entry for confirmed payment",
                extra={"booking_id": booking.id, "payment_type": payment_type.value},
            )

        self._logger.info(
            "Payment applied",
            extra={
                "booking_id": saved.id,
                "event_id": event_id,
                "payment_type": payment_type.value,
            },
        )
        return PaymentConfirmationDTO(booking=saved, payment=payment, applied=True)
