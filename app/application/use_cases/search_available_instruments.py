from datetime import datetime

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.instrument_repo import InstrumentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.instrument import Instrument
from app.domain.services.availability import available_instruments, blocked_instrument_ids
from app.domain.value_objects.date_range import DateRange


class SearchAvailableInstrumentsUseCase:
    """Instrumentos libres en [pickup, return], con filtros opcionales de ubicación y texto."""

    def __init__(
        self,
        instrument_repo: InstrumentRepo,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
    ) -> None:
        self._instrument_repo = instrument_repo
        self._booking_repo = booking_repo
        self._tx = transaction_manager

    async def execute(
        self,
        pickup_date: datetime,
        return_date: datetime,
        location: str | None = None,
        query: str | None = None,
    ) -> list[Instrument]:
        date_range = DateRange(start=pickup_date, end=return_date)
        async with self._tx.start():
            candidates = await self._instrument_repo.list_available(location=location, query=query)
            overlapping = await self._booking_repo.find_overlapping(date_range)
        return available_instruments(candidates, blocked_instrument_ids(overlapping, date_range))
