from collections.abc import Iterable, Sequence

from app.application.interfaces.instrument_repo import InstrumentRepo
from app.domain.entities.instrument import Instrument
from app.domain.errors import InstrumentNotFoundError


class InMemoryInstrumentRepo(InstrumentRepo):
    def __init__(self, instruments: Iterable[Instrument] = ()) -> None:
        self.instruments: dict[str, Instrument] = {i.id: i for i in instruments}

    def add(self, instrument: Instrument) -> Instrument:
        self.instruments[instrument.id] = instrument
        return instrument

    async def get(self, instrument_id: str) -> Instrument | None:
        return self.instruments.get(instrument_id)

    async def list_available(
        self,
        location: str | None = None,
        query: str | None = None,
    ) -> Sequence[Instrument]:
        return [
            instrument
            for instrument in self.instruments.values()
            if instrument.is_available and instrument.matches(location=location, query=query)
        ]

    async def set_availability(self, instrument_id: str, is_available: bool) -> None:
        instrument = self.instruments.get(instrument_id)
        if instrument is None:
            raise InstrumentNotFoundError(instrument_id)
        self.instruments[instrument_id] = instrument.with_availability(is_available)
