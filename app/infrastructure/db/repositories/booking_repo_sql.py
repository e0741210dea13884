from collections.abc import Sequence
from dataclasses import replace

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.booking_dto import BookingFilters
from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.errors import BookingNotFoundError, BookingOverlapError, OptimisticLockError
from app.domain.value_objects.date_range import DateRange
from app.infrastructure.db.tables import bookings, instruments


class BookingRepoSQL(BookingRepo):
    """
    Reservas sobre SQLAlchemy Core.

    El chequeo de superposición bloquea la fila del instrumento con
    SELECT ... FOR UPDATE, así dos altas concurrentes del mismo instrumento
    se serializan dentro de sus transacciones.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, booking_id: str) -> Booking | None:
        stmt = select(bookings).where(bookings.c.id == booking_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_booking(row) if row else None

    async def add_if_available(self, booking: Booking) -> Booking:
        await self._lock_instrument(booking.instrument_id)
        await self._check_overlap(booking)
        await self._session.execute(insert(bookings).values(**self._to_row(booking)))
        return booking

    async def update(self, booking: Booking, expected_version: int) -> Booking:
        values = self._to_row(booking)
        values.pop("id")
        values["version"] = expected_version + 1
        stmt = (
            update(bookings)
            .where(bookings.c.id == booking.id, bookings.c.version == expected_version)
            .values(**values)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            exists = await self._session.execute(
                select(bookings.c.id).where(bookings.c.id == booking.id)
            )
            if exists.scalar() is None:
                raise BookingNotFoundError(booking.id)
            raise OptimisticLockError(booking.id, expected_version)
        return replace(booking, version=expected_version + 1)

    async def update_if_available(self, booking: Booking, expected_version: int) -> Booking:
        await self._lock_instrument(booking.instrument_id)
        await self._check_overlap(booking)
        return await self.update(booking, expected_version)

    async def find_overlapping(
        self,
        date_range: DateRange,
        instrument_id: str | None = None,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        stmt = select(bookings).where(
            bookings.c.status != BookingStatus.CANCELLED.value,
            bookings.c.pickup_date <= date_range.end,
            bookings.c.return_date >= date_range.start,
        )
        if instrument_id is not None:
            stmt = stmt.where(bookings.c.instrument_id == instrument_id)
        if exclude_booking_id is not None:
            stmt = stmt.where(bookings.c.id != exclude_booking_id)
        result = await self._session.execute(stmt)
        return [self._map_booking(row) for row in result.mappings().all()]

    async def list_by_renter(
        self,
        renter_id: str,
        filters: BookingFilters,
    ) -> tuple[list[Booking], int]:
        return await self._page([bookings.c.renter_id == renter_id], filters)

    async def list_by_owner(
        self,
        owner_id: str | None,
        filters: BookingFilters,
    ) -> tuple[list[Booking], int]:
        conditions = [] if owner_id is None else [bookings.c.owner_id == owner_id]
        return await self._page(conditions, filters)

    async def _lock_instrument(self, instrument_id: str) -> None:
        stmt = select(instruments.c.id).where(instruments.c.id == instrument_id).with_for_update()
        await self._session.execute(stmt)

    async def _check_overlap(self, booking: Booking) -> None:
        conflicts = await self.find_overlapping(
            booking.date_range,
            instrument_id=booking.instrument_id,
            exclude_booking_id=booking.id,
        )
        if conflicts:
            raise BookingOverlapError(booking.instrument_id, [b.id for b in conflicts])

    async def _page(self, conditions: list, filters: BookingFilters) -> tuple[list[Booking], int]:
        if filters.statuses:
            conditions.append(bookings.c.status.in_([s.value for s in filters.statuses]))
        if filters.payment_status:
            conditions.append(bookings.c.payment_status == filters.payment_status.value)
        if filters.end:
            conditions.append(bookings.c.pickup_date <= filters.end)
        if filters.start:
            conditions.append(bookings.c.return_date >= filters.start)

        count_stmt = select(func.count()).select_from(bookings).where(*conditions)
        total = (await self._session.execute(count_stmt)).scalar_one()

        stmt = (
            select(bookings)
            .where(*conditions)
            .order_by(bookings.c.created_at.desc(), bookings.c.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        result = await self._session.execute(stmt)
        return [self._map_booking(row) for row in result.mappings().all()], total

    def _to_row(self, booking: Booking) -> dict:
        return {
            "id": booking.id,
            "instrument_id": booking.instrument_id,
            "renter_id": booking.renter_id,
            "owner_id": booking.owner_id,
            "pickup_date": booking.pickup_date,
            "return_date": booking.return_date,
            "price": booking.price,
            "commission": booking.commission,
            "owner_payout": booking.owner_payout,
            "currency": booking.currency,
            "status": booking.status.value,
            "payment_status": booking.payment_status.value,
            "provider_session_id": booking.provider_session_id,
            "provider_intent_id": booking.provider_intent_id,
            "last_webhook_event_id": booking.last_webhook_event_id,
            "last_webhook_at": booking.last_webhook_at,
            "paid_at": booking.paid_at,
            "pickup_confirmed_at": booking.pickup_confirmed_at,
            "return_confirmed_at": booking.return_confirmed_at,
            "cancelled_at": booking.cancelled_at,
            "late_days": booking.late_days,
            "late_fee": booking.late_fee,
            "late_fee_paid": booking.late_fee_paid,
            "late_fee_paid_at": booking.late_fee_paid_at,
            "version": booking.version,
            "created_at": booking.created_at,
            "updated_at": booking.updated_at,
        }

    def _map_booking(self, row) -> Booking:
        # Booking normaliza los datetimes a UTC (SQLite los devuelve naive)
        return Booking(
            id=row["id"],
            instrument_id=row["instrument_id"],
            renter_id=row["renter_id"],
            owner_id=row["owner_id"],
            pickup_date=row["pickup_date"],
            return_date=row["return_date"],
            price=row["price"],
            commission=row["commission"],
            owner_payout=row["owner_payout"],
            currency=row["currency"],
            status=row["status"],
            payment_status=row["payment_status"],
            provider_session_id=row.get("provider_session_id"),
            provider_intent_id=row.get("provider_intent_id"),
            last_webhook_event_id=row.get("last_webhook_event_id"),
            last_webhook_at=row.get("last_webhook_at"),
            paid_at=row.get("paid_at"),
            pickup_confirmed_at=row.get("pickup_confirmed_at"),
            return_confirmed_at=row.get("return_confirmed_at"),
            cancelled_at=row.get("cancelled_at"),
            late_days=row["late_days"] or 0,
            late_fee=row["late_fee"],
            late_fee_paid=bool(row["late_fee_paid"]),
            late_fee_paid_at=row.get("late_fee_paid_at"),
            version=row["version"],
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
