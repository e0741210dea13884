import logging
from datetime import datetime
from decimal import Decimal

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.instrument_repo import InstrumentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import UUIDGenerator
from app.domain.entities.booking import Booking
from app.domain.errors import (
    ForbiddenActionError,
    InstrumentNotFoundError,
    InstrumentUnavailableError,
)
from app.domain.services.pricing import DEFAULT_COMMISSION_RATE, quote_rental
from app.domain.value_objects.actor import Actor
from app.domain.value_objects.date_range import DateRange


class CreateBookingUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        instrument_repo: InstrumentRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        id_generator: UUIDGenerator,
        currency: str = "lkr",
        commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
    ) -> None:
        self._booking_repo = booking_repo
        self._instrument_repo = instrument_repo
        self._tx = transaction_manager
        self._clock = clock
        self._id_generator = id_generator
        self._currency = currency
        self._commission_rate = commission_rate
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        actor: Actor,
        instrument_id: str,
        pickup_date: datetime,
        return_date: datetime,
    ) -> Booking:
        date_range = DateRange(start=pickup_date, end=return_date)

        async with self._tx.start():
            instrument = await self._instrument_repo.get(instrument_id)
            if instrument is None:
                raise InstrumentNotFoundError(instrument_id)
            if not instrument.is_available:
                raise InstrumentUnavailableError(instrument_id)
            if instrument.owner_id == actor.user_id:
                raise ForbiddenActionError(actor.user_id, "reservar su propio instrumento")

            quote = quote_rental(
                date_range,
                price_per_day=instrument.price_per_day,
                currency_code=self._currency,
                commission_rate=self._commission_rate,
            )
            booking = Booking.create(
                booking_id=self._id_generator.generate_booking_id(),
                instrument_id=instrument.id,
                renter_id=actor.user_id,
                owner_id=instrument.owner_id,
                date_range=date_range,
                quote=quote,
                created_at=self._clock.now(),
            )
            booking = await self._booking_repo.add_if_available(booking)

        self._logger.info(
            "Booking created",
            extra={
                "booking_id": booking.id,
                "instrument_id": booking.instrument_id,
                "rental_days": quote.days,
                "price": str(booking.price),
            },
        )
        return booking
