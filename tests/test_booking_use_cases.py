"""
Tests de los casos de uso de reservas sobre los repositorios in-memory.

Cubren alta con chequeo de superposición, cambios de estado, cancelación,
edición de fechas, retiro/devolución con recargo y listados.
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.application.dtos.booking_dto import BookingFilters
from app.domain.entities.booking import BookingPaymentStatus, BookingStatus
from app.domain.entities.instrument import Instrument
from app.domain.entities.payment import PaymentType
from app.domain.errors import (
    BookingNotFoundError,
    BookingOverlapError,
    ForbiddenActionError,
    InstrumentNotFoundError,
    InstrumentUnavailableError,
    InvalidBookingTransitionError,
    OptimisticLockError,
    ValidationError,
)
from app.domain.value_objects.actor import Actor, Role


def _utc(month: int, day: int, hour: int = 0) -> datetime:
    return datetime(2024, month, day, hour, tzinfo=timezone.utc)


async def _create(use_cases, renter, pickup_day=5, return_day=10, instrument_id="inst-guitar"):
    return await use_cases["create_booking"].execute(
        actor=renter,
        instrument_id=instrument_id,
        pickup_date=_utc(1, pickup_day),
        return_date=_utc(1, return_day),
    )


async def _pay(use_cases, booking, event_id="evt_paid"):
    result = await use_cases["apply_payment_confirmation"].execute(
        booking_id=booking.id, payment_type=PaymentType.RENTAL, event_id=event_id
    )
    return result.booking


# ============================================================================
# ALTA
# ============================================================================


async def test_create_booking_prices_the_rental(use_cases, instrument, renter):
    booking = await use_cases["create_booking"].execute(
        actor=renter,
        instrument_id=instrument.id,
        pickup_date=_utc(1, 1),
        return_date=_utc(1, 4),
    )

    assert booking.id == "t-booking-0001"
    assert booking.owner_id == instrument.owner_id
    assert booking.price == Decimal("3000")
    assert booking.commission == Decimal("300")
    assert booking.owner_payout == Decimal("2700")
    assert booking.currency == "lkr"
    assert booking.status == BookingStatus.PENDING


async def test_overlapping_request_is_rejected(use_cases, instrument, renter, owner, bundle):
    existing = await _create(use_cases, renter, 5, 10)
    await _pay(use_cases, existing)
    await use_cases["change_booking_status"].execute(existing.id, owner, BookingStatus.CONFIRMED)

    other_renter = Actor(user_id="renter-2", role=Role.RENTER)
    with pytest.raises(BookingOverlapError) as exc_info:
        await _create(use_cases, other_renter, 8, 12)
    assert exc_info.value.conflicting_booking_ids == [existing.id]

    accepted = await _create(use_cases, other_renter, 11, 15)
    assert accepted.id in bundle["booking_repo"].bookings


async def test_cancelled_booking_frees_the_dates(use_cases, instrument, renter):
    booking = await _create(use_cases, renter, 5, 10)
    await use_cases["cancel_booking"].execute(booking.id, renter)

    again = await _create(use_cases, renter, 5, 10)
    assert again.id != booking.id


async def test_concurrent_requests_only_one_wins(use_cases, instrument):
    renters = [Actor(user_id=f"renter-{n}", role=Role.RENTER) for n in range(5)]

    results = await asyncio.gather(
        *(_create(use_cases, renter, 5, 10) for renter in renters),
        return_exceptions=True,
    )

    created = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, BookingOverlapError)]
    assert len(created) == 1
    assert len(rejected) == 4


async def test_create_guards(use_cases, bundle, instrument, renter, owner):
    with pytest.raises(InstrumentNotFoundError):
        await _create(use_cases, renter, instrument_id="missing")

    with pytest.raises(ForbiddenActionError):
        await _create(use_cases, owner)

    bundle["instrument_repo"].add(instrument.with_availability(False))
    with pytest.raises(InstrumentUnavailableError):
        await _create(use_cases, renter)


async def test_search_available_instruments(use_cases, bundle, instrument, renter):
    bundle["instrument_repo"].add(
        Instrument(
            id="inst-drums",
            owner_id="owner-2",
            price_per_day=Decimal("2500"),
            brand="Yamaha",
            category="Drums",
            location="Kandy",
        )
    )
    await _create(use_cases, renter, 5, 10)

    search = use_cases["search_instruments"]
    busy = await search.execute(_utc(1, 9), _utc(1, 12))
    assert [i.id for i in busy] == ["inst-drums"]

    free = await search.execute(_utc(1, 11), _utc(1, 15))
    assert {i.id for i in free} == {"inst-guitar", "inst-drums"}

    by_location = await search.execute(_utc(1, 11), _utc(1, 15), location="colombo")
    assert [i.id for i in by_location] == ["inst-guitar"]


# ============================================================================
# CONSULTA Y ESTADOS
# ============================================================================


async def test_get_booking_visibility(use_cases, instrument, renter, owner, admin):
    booking = await _create(use_cases, renter)

    for actor in (renter, owner, admin):
        assert (await use_cases["get_booking"].execute(booking.id, actor)).id == booking.id

    stranger = Actor(user_id="someone", role=Role.RENTER)
    with pytest.raises(ForbiddenActionError):
        await use_cases["get_booking"].execute(booking.id, stranger)
    with pytest.raises(BookingNotFoundError):
        await use_cases["get_booking"].execute("missing", renter)


async def test_confirm_pickup_and_second_pickup_fails(use_cases, bundle, instrument, renter, owner):
    booking = await _create(use_cases, renter)
    await _pay(use_cases, booking)

    confirmed = await use_cases["change_booking_status"].execute(
        booking.id, owner, BookingStatus.CONFIRMED
    )
    assert confirmed.status == BookingStatus.CONFIRMED

    picked_up = await use_cases["mark_pickup"].execute(booking.id, owner)
    assert picked_up.pickup_confirmed_at is not None
    assert bundle["instrument_repo"].instruments[instrument.id].is_available is False

    with pytest.raises(InvalidBookingTransitionError):
        await use_cases["mark_pickup"].execute(booking.id, owner)


async def test_only_owner_or_admin_changes_status(use_cases, instrument, renter, admin):
    booking = await _create(use_cases, renter)

    with pytest.raises(ForbiddenActionError):
        await use_cases["change_booking_status"].execute(booking.id, renter, BookingStatus.CANCELLED)

    other_owner = Actor(user_id="owner-2", role=Role.OWNER)
    with pytest.raises(ForbiddenActionError):
        await use_cases["change_booking_status"].execute(
            booking.id, other_owner, BookingStatus.CANCELLED
        )

    cancelled = await use_cases["change_booking_status"].execute(
        booking.id, admin, BookingStatus.CANCELLED
    )
    assert cancelled.cancelled_at is not None


async def test_unpaid_booking_cannot_be_confirmed(use_cases, instrument, renter, owner):
    booking = await _create(use_cases, renter)
    with pytest.raises(InvalidBookingTransitionError):
        await use_cases["change_booking_status"].execute(booking.id, owner, BookingStatus.CONFIRMED)


async def test_owner_can_cancel_confirmed_booking(use_cases, instrument, renter, owner, clock):
    booking = await _create(use_cases, renter)
    await _pay(use_cases, booking)
    await use_cases["change_booking_status"].execute(booking.id, owner, BookingStatus.CONFIRMED)

    with pytest.raises(InvalidBookingTransitionError):
        await use_cases["cancel_booking"].execute(booking.id, renter)

    cancelled = await use_cases["change_booking_status"].execute(
        booking.id, owner, BookingStatus.CANCELLED
    )
    assert cancelled.cancelled_at == clock.now()
    assert cancelled.is_paid


async def test_renter_cancel_is_idempotent(use_cases, instrument, renter, owner, clock):
    booking = await _create(use_cases, renter)

    with pytest.raises(ForbiddenActionError):
        await use_cases["cancel_booking"].execute(booking.id, owner)

    first = await use_cases["cancel_booking"].execute(booking.id, renter)
    clock.advance(hours=2)
    second = await use_cases["cancel_booking"].execute(booking.id, renter)
    assert second.cancelled_at == first.cancelled_at
    assert second.version == first.version


# ============================================================================
# EDICIÓN DE FECHAS
# ============================================================================


async def test_update_dates_recomputes_price(use_cases, instrument, renter):
    booking = await _create(use_cases, renter, 5, 10)

    updated = await use_cases["update_booking_dates"].execute(
        booking.id, renter, return_date=_utc(1, 7)
    )

    assert updated.pickup_date == booking.pickup_date
    assert updated.price == Decimal("2000")
    assert updated.commission == Decimal("200")
    assert updated.version == booking.version + 1


async def test_update_dates_rejects_overlap_with_other_bookings(use_cases, instrument, renter):
    first = await _create(use_cases, renter, 5, 10)
    second = await _create(use_cases, renter, 12, 15)

    with pytest.raises(BookingOverlapError):
        await use_cases["update_booking_dates"].execute(
            second.id, renter, pickup_date=_utc(1, 9)
        )
    # Moverse dentro de su propio rango no choca consigo misma
    moved = await use_cases["update_booking_dates"].execute(
        first.id, renter, pickup_date=_utc(1, 6)
    )
    assert moved.price == Decimal("4000")


async def test_update_dates_guards(use_cases, instrument, renter, owner):
    booking = await _create(use_cases, renter)

    with pytest.raises(ValidationError):
        await use_cases["update_booking_dates"].execute(booking.id, renter)
    with pytest.raises(ForbiddenActionError):
        await use_cases["update_booking_dates"].execute(booking.id, owner, return_date=_utc(1, 8))

    await _pay(use_cases, booking)
    with pytest.raises(InvalidBookingTransitionError):
        await use_cases["update_booking_dates"].execute(booking.id, renter, return_date=_utc(1, 8))


# ============================================================================
# DEVOLUCIÓN
# ============================================================================


async def _picked_up(use_cases, renter, owner):
    booking = await _create(use_cases, renter, 5, 10)
    await _pay(use_cases, booking)
    await use_cases["change_booking_status"].execute(booking.id, owner, BookingStatus.CONFIRMED)
    return await use_cases["mark_pickup"].execute(booking.id, owner)


async def test_late_return_charges_fee(use_cases, bundle, clock, instrument, renter, owner):
    booking = await _picked_up(use_cases, renter, owner)

    clock.set_time(_utc(1, 12))
    returned = await use_cases["mark_return"].execute(booking.id, owner)

    assert returned.return_confirmed_at == _utc(1, 12)
    assert returned.late_days == 2
    assert returned.late_fee == Decimal("2000")
    assert returned.late_fee_paid is False
    assert bundle["instrument_repo"].instruments[instrument.id].is_available is True


async def test_on_time_return_has_no_fee(use_cases, clock, instrument, renter, owner):
    booking = await _picked_up(use_cases, renter, owner)

    clock.set_time(_utc(1, 9))
    returned = await use_cases["mark_return"].execute(booking.id, owner)

    assert returned.late_days == 0
    assert returned.late_fee == Decimal("0")
    assert returned.late_fee_paid is True


async def test_return_is_recorded_even_if_fee_fails(use_cases, bundle, clock, instrument, renter, owner):
    booking = await _picked_up(use_cases, renter, owner)
    del bundle["instrument_repo"].instruments[instrument.id]

    clock.set_time(_utc(1, 12))
    returned = await use_cases["mark_return"].execute(booking.id, owner)

    assert returned.return_confirmed_at is not None
    assert returned.late_fee == Decimal("0")


async def test_return_requires_pickup(use_cases, instrument, renter, owner):
    booking = await _create(use_cases, renter)
    with pytest.raises(InvalidBookingTransitionError):
        await use_cases["mark_return"].execute(booking.id, owner)


# ============================================================================
# LISTADOS Y TABLERO
# ============================================================================


async def test_renter_listing_is_paginated_newest_first(use_cases, clock, instrument, renter):
    ids = []
    for start in (1, 5, 9, 13):
        ids.append((await _create(use_cases, renter, start, start + 2)).id)
        clock.advance(minutes=1)

    page = await use_cases["list_renter_bookings"].execute(renter, BookingFilters(page=1, limit=3))
    assert [b.id for b in page.items] == list(reversed(ids))[:3]
    assert page.total == 4
    assert page.total_pages == 2

    second = await use_cases["list_renter_bookings"].execute(renter, BookingFilters(page=2, limit=3))
    assert [b.id for b in second.items] == [ids[0]]


async def test_listing_filters(use_cases, clock, instrument, renter):
    first = await _create(use_cases, renter, 1, 3)
    clock.advance(minutes=1)
    second = await _create(use_cases, renter, 10, 12)
    await _pay(use_cases, second)
    clock.advance(minutes=1)
    cancelled = await _create(use_cases, renter, 20, 22)
    await use_cases["cancel_booking"].execute(cancelled.id, renter)

    list_mine = use_cases["list_renter_bookings"]
    pending = await list_mine.execute(renter, BookingFilters(statuses=(BookingStatus.PENDING,)))
    assert {b.id for b in pending.items} == {first.id, second.id}

    paid = await list_mine.execute(renter, BookingFilters(payment_status=BookingPaymentStatus.PAID))
    assert [b.id for b in paid.items] == [second.id]

    window = await list_mine.execute(renter, BookingFilters(start=_utc(1, 11), end=_utc(1, 21)))
    assert {b.id for b in window.items} == {second.id, cancelled.id}


async def test_owner_listing_scopes(use_cases, bundle, clock, instrument, renter, owner, admin):
    bundle["instrument_repo"].add(
        Instrument(id="inst-bass", owner_id="owner-2", price_per_day=Decimal("700"))
    )
    mine = await _create(use_cases, renter, 5, 10)
    clock.advance(minutes=1)
    theirs = await _create(use_cases, renter, 5, 10, instrument_id="inst-bass")

    owner_page = await use_cases["list_owner_bookings"].execute(owner, BookingFilters())
    assert [b.id for b in owner_page.items] == [mine.id]

    admin_page = await use_cases["list_owner_bookings"].execute(admin, BookingFilters())
    assert [b.id for b in admin_page.items] == [theirs.id, mine.id]

    admin_own = await use_cases["list_owner_bookings"].execute(admin, BookingFilters(), scope="mine")
    assert admin_own.items == []

    with pytest.raises(ForbiddenActionError):
        await use_cases["list_owner_bookings"].execute(renter, BookingFilters())


def test_filters_clamp_pagination():
    filters = BookingFilters(page=0, limit=1000)
    assert filters.page == 1
    assert filters.limit == 100
    assert filters.offset == 0


async def test_owner_dashboard(use_cases, clock, instrument, renter, owner):
    created = []
    for start in (1, 5, 9, 13):
        created.append(await _create(use_cases, renter, start, start + 2))
        clock.advance(minutes=1)

    for booking in created[:2]:
        await _pay(use_cases, booking, event_id=f"evt_{booking.id}")
        await use_cases["change_booking_status"].execute(booking.id, owner, BookingStatus.CONFIRMED)
    await use_cases["cancel_booking"].execute(created[2].id, renter)

    dashboard = await use_cases["owner_dashboard"].execute(owner)

    assert dashboard.total_bookings == 4
    assert dashboard.pending_bookings == 1
    assert dashboard.confirmed_bookings == 2
    assert dashboard.revenue == Decimal("4000")
    assert [b.id for b in dashboard.recent_bookings] == [b.id for b in reversed(created)][:3]


async def test_dashboard_requires_manager(use_cases, renter):
    with pytest.raises(ForbiddenActionError):
        await use_cases["owner_dashboard"].execute(renter)


async def test_version_conflict_is_reported(bundle, use_cases, instrument, renter):
    booking = await _create(use_cases, renter)
    repo = bundle["booking_repo"]
    await repo.update(replace(booking, updated_at=_utc(1, 2)), expected_version=0)

    with pytest.raises(OptimisticLockError):
        await repo.update(replace(booking, updated_at=_utc(1, 3)), expected_version=0)
