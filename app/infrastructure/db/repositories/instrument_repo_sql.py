from collections.abc import Sequence

from sqlalchemy import insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.instrument_repo import InstrumentRepo
from app.domain.entities.instrument import Instrument
from app.domain.errors import InstrumentNotFoundError
from app.infrastructure.db.tables import instruments


class InstrumentRepoSQL(InstrumentRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, instrument: Instrument) -> Instrument:
        await self._session.execute(
            insert(instruments).values(
                id=instrument.id,
                owner_id=instrument.owner_id,
                brand=instrument.brand,
                model=instrument.model,
                category=instrument.category,
                location=instrument.location,
                price_per_day=instrument.price_per_day,
                is_available=instrument.is_available,
            )
        )
        return instrument

    async def get(self, instrument_id: str) -> Instrument | None:
        stmt = select(instruments).where(instruments.c.id == instrument_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_instrument(row) if row else None

    async def list_available(
        self,
        location: str | None = None,
        query: str | None = None,
    ) -> Sequence[Instrument]:
        stmt = select(instruments).where(instruments.c.is_available.is_(True))
        if location and location.strip():
            stmt = stmt.where(instruments.c.location.ilike(f"%{location.strip()}%"))
        if query and query.strip():
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(
                or_(
                    instruments.c.brand.ilike(pattern),
                    instruments.c.model.ilike(pattern),
                    instruments.c.category.ilike(pattern),
                    instruments.c.location.ilike(pattern),
                )
            )
        result = await self._session.execute(stmt.order_by(instruments.c.id))
        return [self._map_instrument(row) for row in result.mappings().all()]

    async def set_availability(self, instrument_id: str, is_available: bool) -> None:
        stmt = (
            update(instruments)
            .where(instruments.c.id == instrument_id)
            .values(is_available=is_available)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise InstrumentNotFoundError(instrument_id)

    def _map_instrument(self, row) -> Instrument:
        return Instrument(
            id=row["id"],
            owner_id=row["owner_id"],
            price_per_day=row["price_per_day"],
            is_available=bool(row["is_available"]),
            brand=row.get("brand") or "",
            model=row.get("model") or "",
            category=row.get("category") or "",
            location=row.get("location") or "",
        )
