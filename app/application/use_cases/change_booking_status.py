import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_access import ensure_manager, require_booking
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.value_objects.actor import Actor


class ChangeBookingStatusUseCase:
    """Cambio de estado por el dueño de la reserva o un admin."""

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

    async def execute(self, booking_id: str, actor: Actor, new_status: BookingStatus) -> Booking:
        async with self._tx.start():
            booking = await require_booking(self._booking_repo, booking_id)
            ensure_manager(booking, actor, "cambiar el estado de esta reserva")

            updated = booking.change_status(BookingStatus(new_status), at=self._clock.now())
            if updated is booking:
                return booking
            saved = await self._booking_repo.update(updated, expected_version=booking.version)

        self._logger.info(
            "Booking status changed",
            extra={
                "booking_id": saved.id,
                "from_status": booking.status.value,
                "to_status": saved.status.value,
                "actor_id": actor.user_id,
            },
        )
        return saved
