from collections.abc import Sequence

from app.domain.entities.instrument import Instrument


class InstrumentRepo:
    async def get(self, instrument_id: str) -> Instrument | None:
        raise NotImplementedError

    async def list_available(
        self,
        location: str | None = None,
        query: str | None = None,
    ) -> Sequence[Instrument]:
        """Instrumentos con is_available=True que coinciden con los filtros."""
        raise NotImplementedError

    async def set_availability(self, instrument_id: str, is_available: bool) -> None:
        raise NotImplementedError
