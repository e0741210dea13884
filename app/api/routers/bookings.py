from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_use_cases
from app.api.schemas.bookings import (
    BookingPageResponse,
    BookingResponse,
    ChangeBookingStatusRequest,
    CreateBookingRequest,
    InstrumentResponse,
    OwnerDashboardResponse,
    UpdateBookingDatesRequest,
)
from app.api.security import get_actor
from app.application.dtos.booking_dto import MAX_PAGE_SIZE, BookingFilters, Page
from app.domain.entities.booking import Booking, BookingPaymentStatus, BookingStatus
from app.domain.value_objects.actor import Actor

router = APIRouter()

UseCases = Annotated[dict, Depends(get_use_cases)]
CurrentActor = Annotated[Actor, Depends(get_actor)]


def _page_response(page: Page[Booking]) -> BookingPageResponse:
    return BookingPageResponse(
        items=[BookingResponse.model_validate(b) for b in page.items],
        page=page.page,
        limit=page.limit,
        total=page.total,
        total_pages=page.total_pages,
    )


def _filters(
    statuses: list[BookingStatus] | None,
    payment_status: BookingPaymentStatus | None,
    start: datetime | None,
    end: datetime | None,
    page: int,
    limit: int,
) -> BookingFilters:
    return BookingFilters(
        statuses=tuple(statuses or ()),
        payment_status=payment_status,
        start=start,
        end=end,
        page=page,
        limit=limit,
    )


@router.get("/instruments/available", response_model=list[InstrumentResponse])
async def search_available_instruments(
    use_cases: UseCases,
    pickup_date: datetime,
    return_date: datetime,
    location: str | None = None,
    q: str | None = None,
) -> list[InstrumentResponse]:
    instruments = await use_cases["search_instruments"].execute(
        pickup_date=pickup_date, return_date=return_date, location=location, query=q
    )
    return [InstrumentResponse.model_validate(i) for i in instruments]


@router.post("/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: CreateBookingRequest,
    actor: CurrentActor,
    use_cases: UseCases,
) -> BookingResponse:
    booking = await use_cases["create_booking"].execute(
        actor=actor,
        instrument_id=payload.instrument_id,
        pickup_date=payload.pickup_date,
        return_date=payload.return_date,
    )
    return BookingResponse.model_validate(booking)


@router.get("/bookings/me", response_model=BookingPageResponse)
async def list_my_bookings(
    actor: CurrentActor,
    use_cases: UseCases,
    status_filter: list[BookingStatus] | None = Query(default=None, alias="status"),
    payment_status: BookingPaymentStatus | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE),
) -> BookingPageResponse:
    filters = _filters(status_filter, payment_status, start, end, page, limit)
    result = await use_cases["list_renter_bookings"].execute(actor=actor, filters=filters)
    return _page_response(result)


@router.get("/bookings/owner", response_model=BookingPageResponse)
async def list_owner_bookings(
    actor: CurrentActor,
    use_cases: UseCases,
    status_filter: list[BookingStatus] | None = Query(default=None, alias="status"),
    payment_status: BookingPaymentStatus | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    scope: str | None = Query(default=None, pattern="^(mine|all)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
) -> BookingPageResponse:
    filters = _filters(status_filter, payment_status, start, end, page, limit)
    result = await use_cases["list_owner_bookings"].execute(
        actor=actor, filters=filters, scope=scope
    )
    return _page_response(result)


@router.get("/bookings/owner/dashboard", response_model=OwnerDashboardResponse)
async def owner_dashboard(actor: CurrentActor, use_cases: UseCases) -> OwnerDashboardResponse:
    dashboard = await use_cases["owner_dashboard"].execute(actor=actor)
    return OwnerDashboardResponse.model_validate(dashboard)


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: str, actor: CurrentActor, use_cases: UseCases) -> BookingResponse:
    booking = await use_cases["get_booking"].execute(booking_id=booking_id, actor=actor)
    return BookingResponse.model_validate(booking)


@router.patch("/bookings/{booking_id}", response_model=BookingResponse)
async def update_booking_dates(
    booking_id: str,
    payload: UpdateBookingDatesRequest,
    actor: CurrentActor,
    use_cases: UseCases,
) -> BookingResponse:
    booking = await use_cases["update_booking_dates"].execute(
        booking_id=booking_id,
        actor=actor,
        pickup_date=payload.pickup_date,
        return_date=payload.return_date,
    )
    return BookingResponse.model_validate(booking)


@router.patch("/bookings/{booking_id}/status", response_model=BookingResponse)
async def change_booking_status(
    booking_id: str,
    payload: ChangeBookingStatusRequest,
    actor: CurrentActor,
    use_cases: UseCases,
) -> BookingResponse:
    booking = await use_cases["change_booking_status"].execute(
        booking_id=booking_id, actor=actor, new_status=payload.status
    )
    return BookingResponse.model_validate(booking)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(booking_id: str, actor: CurrentActor, use_cases: UseCases) -> BookingResponse:
    booking = await use_cases["cancel_booking"].execute(booking_id=booking_id, actor=actor)
    return BookingResponse.model_validate(booking)


@router.post("/bookings/{booking_id}/pickup", response_model=BookingResponse)
async def mark_pickup(booking_id: str, actor: CurrentActor, use_cases: UseCases) -> BookingResponse:
    booking = await use_cases["mark_pickup"].execute(booking_id=booking_id, actor=actor)
    return BookingResponse.model_validate(booking)


@router.post("/bookings/{booking_id}/return", response_model=BookingResponse)
async def mark_return(booking_id: str, actor: CurrentActor, use_cases: UseCases) -> BookingResponse:
    booking = await use_cases["mark_return"].execute(booking_id=booking_id, actor=actor)
    return BookingResponse.model_validate(booking)
