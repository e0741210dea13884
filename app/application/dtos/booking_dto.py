"""DTOs para reservas."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Generic, TypeVar

from app.domain.entities.booking import Booking, BookingPaymentStatus, BookingStatus

T = TypeVar("T")

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class BookingFilters:
    """
    Filtros de listado de reservas.

    start/end filtran por superposición con la ventana: una reserva entra si
    pickup <= end y return >= start.
    """

    statuses: tuple[BookingStatus, ...] = ()
    payment_status: BookingPaymentStatus | None = None
    start: datetime | None = None
    end: datetime | None = None
    page: int = 1
    limit: int = 10

    def __post_init__(self) -> None:
        object.__setattr__(self, "page", max(self.page, 1))
        object.__setattr__(self, "limit", min(max(self.limit, 1), MAX_PAGE_SIZE))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def matches(self, booking: Booking) -> bool:
        if self.statuses and booking.status not in self.statuses:
            return False
        if self.payment_status and booking.payment_status != self.payment_status:
            return False
        if self.end and booking.pickup_date > self.end:
            return False
        if self.start and booking.return_date < self.start:
            return False
        return True


@dataclass
class Page(Generic[T]):
    """Página de resultados con los metadatos de paginación."""

    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass
class OwnerDashboardDTO:
    """Resumen del tablero del dueño."""

    total_bookings: int = 0
    pending_bookings: int = 0
    confirmed_bookings: int = 0
    revenue: Decimal = Decimal("0")
    recent_bookings: list[Booking] = field(default_factory=list)
