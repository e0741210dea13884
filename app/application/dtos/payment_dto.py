"""DTOs para pagos y conciliación."""

from dataclasses import dataclass

from app.domain.entities.booking import Booking
from app.domain.entities.payment import Payment, PaymentType


@dataclass
class CheckoutSessionDTO:
    """Sesión de checkout creada en el proveedor."""

    session_id: str
    url: str | None


@dataclass
class ProviderSessionDTO:
    """Estado de una sesión según el proveedor (fuente de verdad)."""

    session_id: str
    payment_status: str  # paid | unpaid | no_payment_required
    payment_intent_id: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


@dataclass
class StartCheckoutResultDTO:
    booking: Booking
    payment: Payment
    session_id: str
    url: str | None


@dataclass
class PaymentConfirmationDTO:
    """Resultado de aplicar un cobro; applied=False si ya estaba aplicado."""

    booking: Booking
    payment: Payment | None
    applied: bool


@dataclass
class WebhookResultDTO:
    event_id: str | None
    event_type: str | None
    handled: bool
    applied: bool = False
    booking_id: str | None = None
    payment_type: PaymentType | None = None


@dataclass
class SyncResultDTO:
    """
    Resultado de la sincronización manual.

    payment_status es el valor que reportó el proveedor, sin traducir.
    """

    booking: Booking
    payment_type: PaymentType
    payment_status: str
    applied: bool
