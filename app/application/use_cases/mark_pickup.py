import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.instrument_repo import InstrumentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_access import ensure_manager, require_booking
from app.domain.entities.booking import Booking
from app.domain.value_objects.actor import Actor


class MarkPickupUseCase:
    """Registra el retiro del instrumento y lo retira del catálogo disponible."""

    def __init__(
        self,
        booking_repo: BookingRepo,
        instrument_repo: InstrumentRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._instrument_repo = instrument_repo
        self._tx = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: str, actor: Actor) -> Booking:
        async with self._tx.start():
            booking = await require_booking(self._booking_repo, booking_id)
            ensure_manager(booking, actor, "marcar el retiro")

            updated = booking.mark_picked_up(at=self._clock.now())
            saved = await self._booking_repo.update(updated, expected_version=booking.version)

            instrument = await self._instrument_repo.get(booking.instrument_id)
            if instrument is not None and instrument.is_available:
                await self._instrument_repo.set_availability(instrument.id, False)

        self._logger.info(
            "Pickup recorded",
            extra={"booking_id": saved.id, "instrument_id": saved.instrument_id},
        )
        return saved
