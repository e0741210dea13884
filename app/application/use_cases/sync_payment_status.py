import logging

from app.application.dtos.payment_dto import SyncResultDTO
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.apply_payment_confirmation import ApplyPaymentConfirmationUseCase
from app.application.use_cases.booking_access import ensure_party, require_booking
from app.domain.entities.booking import Booking
from app.domain.entities.payment import PaymentKey, PaymentType
from app.domain.errors import PaymentNotFoundError
from app.domain.value_objects.actor import Actor

MANUAL_SYNC_PREFIX = "manual_sync:"


class SyncPaymentStatusUseCase:
    """
    Consulta al proveedor el estado de la sesión de checkout guardada.

    Si el proveedor la reporta pagada aplica el cobro con el id de evento
    sintético "manual_sync:<session_id>"; en otro caso devuelve el estado
    del proveedor sin tocar nada. Los errores del proveedor se propagan
    como PaymentProviderError.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_repo: PaymentRepo,
        payment_gateway: PaymentGateway,
        apply_confirmation: ApplyPaymentConfirmationUseCase,
        transaction_manager: TransactionManager,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_repo = payment_repo
        self._payment_gateway = payment_gateway
        self._apply_confirmation = apply_confirmation
        self._tx = transaction_manager
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        booking_id: str,
        actor: Actor,
        payment_type: PaymentType = PaymentType.RENTAL,
    ) -> SyncResultDTO:
        payment_type = PaymentType(payment_type)

        async with self._tx.start():
            booking = await require_booking(self._booking_repo, booking_id)
            ensure_party(booking, actor, "sincronizar el pago de esta reserva")
            if booking.is_payment_settled(payment_type):
                return SyncResultDTO(
                    booking=booking, payment_type=payment_type, payment_status="paid", applied=False
                )
            session_id = await self._session_id_for(booking, payment_type)

        provider_session = await self._payment_gateway.retrieve_session(session_id)
        if not provider_session.is_paid:
            self._logger.info(
                "Manual sync: session not paid",
                extra={
                    "booking_id": booking.id,
                    "session_id": session_id,
                    "payment_status": provider_session.payment_status,
                },
            )
            return SyncResultDTO(
                booking=booking,
                payment_type=payment_type,
                payment_status=provider_session.payment_status,
                applied=False,
            )

        result = await self._apply_confirmation.execute(
            booking_id=booking.id,
            payment_type=payment_type,
            event_id=f"{MANUAL_SYNC_PREFIX}{session_id}",
            provider_intent_id=provider_session.payment_intent_id,
        )
        self._logger.info(
            "Manual sync applied payment",
            extra={"booking_id": booking.id, "session_id": session_id, "applied": result.applied},
        )
        return SyncResultDTO(
            booking=result.booking,
            payment_type=payment_type,
            payment_status=provider_session.payment_status,
            applied=result.applied,
        )

    async def _session_id_for(self, booking: Booking, payment_type: PaymentType) -> str:
        if payment_type == PaymentType.RENTAL and booking.provider_session_id:
            return booking.provider_session_id
        payment = await self._payment_repo.get_by_key(
            PaymentKey(booking_id=booking.id, user_id=booking.renter_id, type=payment_type)
        )
        if payment is None or not payment.provider_session_id:
            raise PaymentNotFoundError(booking.id, payment_type.value)
        return payment.provider_session_id
