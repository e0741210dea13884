import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.instrument_repo import InstrumentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_access import ensure_manager, require_booking
from app.domain.entities.booking import Booking
from app.domain.entities.instrument import Instrument
from app.domain.errors import InstrumentNotFoundError
from app.domain.services.late_fee import assess_late_fee
from app.domain.value_objects.actor import Actor


class MarkReturnUseCase:
    """
    Registra la devolución, calcula el recargo por atraso y vuelve a
    publicar el instrumento como disponible.

    Si el cálculo del recargo falla la devolución se registra igual y los
    campos de recargo quedan como estaban.
    """

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
        now = self._clock.now()
        async with self._tx.start():
            booking = await require_booking(self._booking_repo, booking_id)
            ensure_manager(booking, actor, "marcar la devolución")

            returned = booking.mark_returned(at=now)
            instrument = await self._instrument_repo.get(booking.instrument_id)
            returned = self._apply_late_fee(returned, instrument)
            saved = await self._booking_repo.update(returned, expected_version=booking.version)

            if instrument is not None and not instrument.is_available:
                await self._instrument_repo.set_availability(instrument.id, True)

        self._logger.info(
            "Return recorded",
            extra={
                "booking_id": saved.id,
                "late_days": saved.late_days,
                "late_fee": str(saved.late_fee),
            },
        )
        return saved

    def _apply_late_fee(self, booking: Booking, instrument: Instrument | None) -> Booking:
        try:
            if instrument is None:
                raise InstrumentNotFoundError(booking.instrument_id)
            assessment = assess_late_fee(
                planned_return=booking.return_date,
                actual_return=booking.return_confirmed_at,
                price_per_day=instrument.price_per_day,
            )
            return booking.with_late_fee(assessment.late_days, assessment.late_fee)
        except Exception:
            self._logger.exception(
                "Late fee computation failed; return recorded without fee",
                extra={"booking_id": booking.id},
            )
            return booking
