from collections.abc import Sequence

from app.application.dtos.booking_dto import BookingFilters
from app.domain.entities.booking import Booking
from app.domain.value_objects.date_range import DateRange


class BookingRepo:
    async def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    async def add_if_available(self, booking: Booking) -> Booking:
        """
        Inserta la reserva solo si no hay otra activa superpuesta del mismo
        instrumento. El chequeo y la escritura son atómicos frente a otras
        escrituras del instrumento; si hay conflicto lanza BookingOverlapError.
        """
        raise NotImplementedError

    async def update(self, booking: Booking, expected_version: int) -> Booking:
        """
        Compare-and-swap sobre version. Si la versión guardada no coincide
        lanza OptimisticLockError. Retorna la reserva con version + 1.
        """
        raise NotImplementedError

    async def update_if_available(self, booking: Booking, expected_version: int) -> Booking:
        """Como update, pero re-chequea superposición de fechas excluyendo la propia reserva."""
        raise NotImplementedError

    async def find_overlapping(
        self,
        date_range: DateRange,
        instrument_id: str | None = None,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        raise NotImplementedError

    async def list_by_renter(
        self,
        renter_id: str,
        filters: BookingFilters,
    ) -> tuple[list[Booking], int]:
        raise NotImplementedError

    async def list_by_owner(
        self,
        owner_id: str | None,
        filters: BookingFilters,
    ) -> tuple[list[Booking], int]:
        """owner_id=None lista las reservas de todos los dueños (vista admin)."""
        raise NotImplementedError
