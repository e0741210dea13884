"""Entidades del dominio de rentas."""

from app.domain.entities.booking import Booking, BookingPaymentStatus, BookingStatus
from app.domain.entities.instrument import Instrument
from app.domain.entities.payment import Payment, PaymentKey, PaymentStatus, PaymentType

__all__ = [
    # Booking
    "Booking",
    "BookingStatus",
    "BookingPaymentStatus",
    # Payment
    "Payment",
    "PaymentKey",
    "PaymentStatus",
    "PaymentType",
    # Instrument
    "Instrument",
]
