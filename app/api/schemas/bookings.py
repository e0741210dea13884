from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, constr

from app.domain.entities.booking import BookingPaymentStatus, BookingStatus


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    instrument_id: constr(strip_whitespace=True, min_length=1)
    pickup_date: datetime
    return_date: datetime


class UpdateBookingDatesRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pickup_date: datetime | None = None
    return_date: datetime | None = None


class ChangeBookingStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: BookingStatus


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    instrument_id: str
    renter_id: str
    owner_id: str
    pickup_date: datetime
    return_date: datetime
    price: Decimal
    commission: Decimal
    owner_payout: Decimal
    currency: str
    status: BookingStatus
    payment_status: BookingPaymentStatus
    provider_session_id: str | None = None
    paid_at: datetime | None = None
    pickup_confirmed_at: datetime | None = None
    return_confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    late_days: int = 0
    late_fee: Decimal = Decimal("0")
    late_fee_paid: bool = False
    late_fee_paid_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BookingPageResponse(BaseModel):
    items: list[BookingResponse]
    page: int
    limit: int
    total: int
    total_pages: int


class InstrumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    brand: str
    model: str
    category: str
    location: str
    price_per_day: Decimal
    is_available: bool


class OwnerDashboardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_bookings: int
    pending_bookings: int
    confirmed_bookings: int
    revenue: Decimal
    recent_bookings: list[BookingResponse] = Field(default_factory=list)
