import asyncio
from collections.abc import Sequence
from dataclasses import replace

from app.application.dtos.booking_dto import BookingFilters
from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import Booking
from app.domain.errors import BookingNotFoundError, BookingOverlapError, OptimisticLockError
from app.domain.services.availability import conflicting_bookings
from app.domain.value_objects.date_range import DateRange


class InMemoryBookingRepo(BookingRepo):
    """
    Repositorio en memoria.

    Un asyncio.Lock serializa las escrituras, así el chequeo de superposición
    y el alta/actualización son atómicos entre corrutinas.
    """

    def __init__(self) -> None:
        self.bookings: dict[str, Booking] = {}
        self._lock = asyncio.Lock()

    async def get(self, booking_id: str) -> Booking | None:
        return self.bookings.get(booking_id)

    async def add_if_available(self, booking: Booking) -> Booking:
        async with self._lock:
            self._check_overlap(booking)
            self.bookings[booking.id] = booking
            return booking

    async def update(self, booking: Booking, expected_version: int) -> Booking:
        async with self._lock:
            return self._swap(booking, expected_version)

    async def update_if_available(self, booking: Booking, expected_version: int) -> Booking:
        async with self._lock:
            self._check_overlap(booking)
            return self._swap(booking, expected_version)

    async def find_overlapping(
        self,
        date_range: DateRange,
        instrument_id: str | None = None,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        return [
            booking
            for booking in self.bookings.values()
            if booking.blocks_calendar
            and booking.id != exclude_booking_id
            and (instrument_id is None or booking.instrument_id == instrument_id)
            and booking.date_range.overlaps_with(date_range)
        ]

    async def list_by_renter(
        self,
        renter_id: str,
        filters: BookingFilters,
    ) -> tuple[list[Booking], int]:
        return self._page(
            [b for b in self.bookings.values() if b.renter_id == renter_id], filters
        )

    async def list_by_owner(
        self,
        owner_id: str | None,
        filters: BookingFilters,
    ) -> tuple[list[Booking], int]:
        return self._page(
            [b for b in self.bookings.values() if owner_id is None or b.owner_id == owner_id],
            filters,
        )

    def _check_overlap(self, booking: Booking) -> None:
        conflicts = conflicting_bookings(
            self.bookings.values(),
            instrument_id=booking.instrument_id,
            date_range=booking.date_range,
            exclude_booking_id=booking.id,
        )
        if conflicts:
            raise BookingOverlapError(booking.instrument_id, [b.id for b in conflicts])

    def _swap(self, booking: Booking, expected_version: int) -> Booking:
        current = self.bookings.get(booking.id)
        if current is None:
            raise BookingNotFoundError(booking.id)
        if current.version != expected_version:
            raise OptimisticLockError(booking.id, expected_version)
        stored = replace(booking, version=expected_version + 1)
        self.bookings[booking.id] = stored
        return stored

    @staticmethod
    def _page(bookings: list[Booking], filters: BookingFilters) -> tuple[list[Booking], int]:
        matching = [b for b in bookings if filters.matches(b)]
        matching.sort(key=lambda b: (b.created_at is not None, b.created_at), reverse=True)
        return matching[filters.offset : filters.offset + filters.limit], len(matching)
