"""Chequeo de disponibilidad: decide si un rango de fechas se puede reservar."""

from collections.abc import Iterable

from app.domain.entities.booking import Booking
from app.domain.entities.instrument import Instrument
from app.domain.value_objects.date_range import DateRange


def conflicting_bookings(
    bookings: Iterable[Booking],
    instrument_id: str,
    date_range: DateRange,
    exclude_booking_id: str | None = None,
) -> list[Booking]:
    """
    Reservas activas del instrumento que chocan con el rango pedido.

    Una reserva existente bloquea si existing.pickup <= return y
    existing.return >= pickup (intervalo cerrado). Las canceladas no cuentan.
    """
    return [
        booking
        for booking in bookings
        if booking.instrument_id == instrument_id
        and booking.blocks_calendar
        and booking.id != exclude_booking_id
        and booking.date_range.overlaps_with(date_range)
    ]


def blocked_instrument_ids(bookings: Iterable[Booking], date_range: DateRange) -> set[str]:
    """Ids de instrumentos con alguna reserva activa superpuesta al rango."""
    return {
        booking.instrument_id
        for booking in bookings
        if booking.blocks_calendar and booking.date_range.overlaps_with(date_range)
    }


def available_instruments(
    instruments: Iterable[Instrument],
    blocked_ids: set[str],
) -> list[Instrument]:
    """Instrumentos publicados como disponibles y sin reservas en el rango."""
    return [
        instrument
        for instrument in instruments
        if instrument.is_available and instrument.id not in blocked_ids
    ]
