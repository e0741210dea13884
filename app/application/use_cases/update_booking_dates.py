import logging
from datetime import datetime
from decimal import Decimal

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.instrument_repo import InstrumentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_access import ensure_renter, require_booking
from app.domain.entities.booking import Booking
from app.domain.errors import InstrumentNotFoundError, ValidationError
from app.domain.services.pricing import DEFAULT_COMMISSION_RATE, quote_rental
from app.domain.value_objects.actor import Actor
from app.domain.value_objects.date_range import DateRange


class UpdateBookingDatesUseCase:
    """
    El arrendatario cambia las fechas de una reserva pendiente y sin pagar.

    Se vuelve a chequear la disponibilidad (excluyendo la propia reserva) y
    se recalculan precio, comisión y pago al dueño.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        instrument_repo: InstrumentRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
    ) -> None:
        self._booking_repo = booking_repo
        self._instrument_repo = instrument_repo
        self._tx = transaction_manager
        self._clock = clock
        self._commission_rate = commission_rate
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        booking_id: str,
        actor: Actor,
        pickup_date: datetime | None = None,
        return_date: datetime | None = None,
    ) -> Booking:
        if pickup_date is None and return_date is None:
            raise ValidationError("pickup_date", "indique al menos una fecha nueva")

        async with self._tx.start():
            booking = await require_booking(self._booking_repo, booking_id)
            ensure_renter(booking, actor, "editar esta reserva")

            date_range = DateRange(
                start=pickup_date or booking.pickup_date,
                end=return_date or booking.return_date,
            )
            instrument = await self._instrument_repo.get(booking.instrument_id)
            if instrument is None:
                raise InstrumentNotFoundError(booking.instrument_id)

            quote = quote_rental(
                date_range,
                price_per_day=instrument.price_per_day,
                currency_code=booking.currency,
                commission_rate=self._commission_rate,
            )
            updated = booking.reschedule(date_range, quote, at=self._clock.now())
            saved = await self._booking_repo.update_if_available(
                updated, expected_version=booking.version
            )

        self._logger.info(
            "Booking dates updated",
            extra={"booking_id": saved.id, "price": str(saved.price)},
        )
        return saved
