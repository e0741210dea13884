import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_access import ensure_renter, require_booking
from app.domain.entities.booking import Booking
from app.domain.value_objects.actor import Actor


class CancelBookingUseCase:
    """
    Cancelación por el arrendatario.

    Una reserva ya cancelada se devuelve sin cambios; una confirmada no se
    puede cancelar por esta vía (solo el dueño o un admin).
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._tx = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: str, actor: Actor) -> Booking:
        async with self._tx.start():
            booking = await require_booking(self._booking_repo, booking_id)
            ensure_renter(booking, actor, "cancelar esta reserva")

            updated = booking.cancel_by_renter(at=self._clock.now())
            if updated is booking:
                return booking
            saved = await self._booking_repo.update(updated, expected_version=booking.version)

        self._logger.info("Booking cancelled by renter", extra={"booking_id": saved.id})
        return saved
