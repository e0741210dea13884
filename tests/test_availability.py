from datetime import datetime, timezone
from decimal import Decimal

from app.domain.entities.booking import Booking
from app.domain.entities.instrument import Instrument
from app.domain.services.availability import (
    available_instruments,
    blocked_instrument_ids,
    conflicting_bookings,
)
from app.domain.services.pricing import quote_rental
from app.domain.value_objects.date_range import DateRange

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _range(start_day: int, end_day: int) -> DateRange:
    return DateRange(
        datetime(2024, 1, start_day, tzinfo=timezone.utc),
        datetime(2024, 1, end_day, tzinfo=timezone.utc),
    )


def _booking(booking_id: str, instrument_id: str, date_range: DateRange) -> Booking:
    return Booking.create(
        booking_id=booking_id,
        instrument_id=instrument_id,
        renter_id="renter-1",
        owner_id="owner-1",
        date_range=date_range,
        quote=quote_rental(date_range, Decimal("1000"), "lkr"),
        created_at=NOW,
    )


def test_conflicts_only_on_same_instrument():
    existing = [_booking("b-1", "X", _range(5, 10)), _booking("b-2", "Y", _range(5, 10))]
    conflicts = conflicting_bookings(existing, "X", _range(8, 12))
    assert [b.id for b in conflicts] == ["b-1"]
    assert conflicting_bookings(existing, "X", _range(11, 15)) == []


def test_cancelled_bookings_do_not_block():
    cancelled = _booking("b-1", "X", _range(5, 10)).cancel_by_renter(at=NOW)
    assert conflicting_bookings([cancelled], "X", _range(8, 12)) == []


def test_booking_does_not_conflict_with_itself():
    booking = _booking("b-1", "X", _range(5, 10))
    assert conflicting_bookings([booking], "X", _range(6, 9), exclude_booking_id="b-1") == []


def test_available_instruments_excludes_blocked_and_unlisted():
    instruments = [
        Instrument(id="X", owner_id="owner-1", price_per_day=Decimal("1000")),
        Instrument(id="Y", owner_id="owner-1", price_per_day=Decimal("1000")),
        Instrument(id="Z", owner_id="owner-1", price_per_day=Decimal("1000"), is_available=False),
    ]
    blocked = blocked_instrument_ids([_booking("b-1", "X", _range(5, 10))], _range(9, 11))
    assert [i.id for i in available_instruments(instruments, blocked)] == ["Y"]


def test_instrument_text_filter():
    guitar = Instrument(
        id="X",
        owner_id="owner-1",
        price_per_day=Decimal("1000"),
        brand="Fender",
        category="Guitar",
        location="Colombo",
    )
    assert guitar.matches(location="colombo", query="fend")
    assert not guitar.matches(location="Kandy")
    assert not guitar.matches(query="drum")
