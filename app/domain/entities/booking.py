"""Entidad Booking - Agregado raíz del dominio de rentas."""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum

from app.domain.entities.payment import PaymentType
from app.domain.errors import InvalidBookingTransitionError, ValidationError
from app.domain.services.pricing import PriceQuote
from app.domain.value_objects.date_range import DateRange, as_utc
from app.domain.value_objects.money import Money


class BookingStatus(str, Enum):
    """Estados posibles de una reserva."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class BookingPaymentStatus(str, Enum):
    """Estados de pago de una reserva."""

    PENDING = "pending"
    PAID = "paid"


_TIMESTAMP_FIELDS = (
    "pickup_date",
    "return_date",
    "paid_at",
    "last_webhook_at",
    "pickup_confirmed_at",
    "return_confirmed_at",
    "cancelled_at",
    "late_fee_paid_at",
    "created_at",
    "updated_at",
)


@dataclass(frozen=True)
class Booking:
    """
    Reserva de un instrumento por un rango de fechas.

    Es inmutable: cada transición devuelve una nueva instancia y el
    constructor valida las invariantes, así que no puede existir una reserva
    en un estado inconsistente.
    """

    # Identificadores
    id: str
    instrument_id: str
    renter_id: str
    owner_id: str

    # Fechas planificadas
    pickup_date: datetime
    return_date: datetime

    # Financieros (derivados, ver PriceQuote)
    price: Decimal
    commission: Decimal
    owner_payout: Decimal
    currency: str = "lkr"

    # Estados
    status: BookingStatus = BookingStatus.PENDING
    payment_status: BookingPaymentStatus = BookingPaymentStatus.PENDING

    # Vínculo con el proveedor de pagos
    provider_session_id: str | None = None
    provider_intent_id: str | None = None
    last_webhook_event_id: str | None = None
    last_webhook_at: datetime | None = None

    # Ciclo de vida
    paid_at: datetime | None = None
    pickup_confirmed_at: datetime | None = None
    return_confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None

    # Devolución tardía
    late_days: int = 0
    late_fee: Decimal = Decimal("0")
    late_fee_paid: bool = False
    late_fee_paid_at: datetime | None = None

    # Control de concurrencia
    version: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", BookingStatus(self.status))
        object.__setattr__(self, "payment_status", BookingPaymentStatus(self.payment_status))
        for name in _TIMESTAMP_FIELDS:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, as_utc(value))
        self._check_invariants()

    def _check_invariants(self) -> None:
        # Lanza InvalidDateRangeError si return <= pickup
        DateRange(start=self.pickup_date, end=self.return_date)

        if self.status == BookingStatus.CONFIRMED and not self.is_paid:
            raise ValidationError("status", "una reserva confirmada debe estar pagada")
        if self.pickup_confirmed_at and not (self.is_confirmed and self.is_paid):
            raise ValidationError("pickup_confirmed_at", "requiere reserva confirmada y pagada")
        if self.return_confirmed_at and not self.pickup_confirmed_at:
            raise ValidationError("return_confirmed_at", "requiere retiro registrado")
        if (self.cancelled_at is not None) != (self.status == BookingStatus.CANCELLED):
            raise ValidationError("cancelled_at", "debe existir si y solo si está cancelada")
        if min(self.price, self.commission, self.owner_payout) < 0:
            raise ValidationError("price", "los montos no pueden ser negativos")
        if self.commission + self.owner_payout != self.price:
            raise ValidationError("commission", "commission + owner_payout debe ser igual a price")
        if self.late_days < 0 or self.late_fee < 0:
            raise ValidationError("late_fee", "no puede ser negativo")

    # === Propiedades calculadas ===

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.pickup_date, end=self.return_date)

    @property
    def price_money(self) -> Money:
        return Money(amount=self.price, currency_code=self.currency)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == BookingPaymentStatus.PAID

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    @property
    def blocks_calendar(self) -> bool:
        """Las reservas canceladas no bloquean el calendario del instrumento."""
        return not self.is_cancelled

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.renter_id, self.owner_id)

    def is_payment_settled(self, payment_type: PaymentType, event_id: str | None = None) -> bool:
        """Indica si el cobro de ese tipo ya fue aplicado (o si el evento ya se procesó)."""
        if event_id and event_id == self.last_webhook_event_id:
            return True
        if PaymentType(payment_type) == PaymentType.LATE_FEE:
            return self.late_fee_paid
        return self.is_paid

    # === Factory ===

    @classmethod
    def create(
        cls,
        booking_id: str,
        instrument_id: str,
        renter_id: str,
        owner_id: str,
        date_range: DateRange,
        quote: PriceQuote,
        created_at: datetime,
    ) -> "Booking":
        """Crea una reserva nueva en estado pending/pending."""
        return cls(
            id=booking_id,
            instrument_id=instrument_id,
            renter_id=renter_id,
            owner_id=owner_id,
            pickup_date=date_range.start,
            return_date=date_range.end,
            price=quote.price.amount,
            commission=quote.commission.amount,
            owner_payout=quote.owner_payout.amount,
            currency=quote.price.currency_code,
            created_at=created_at,
            updated_at=created_at,
        )

    # === Transiciones de estado (dueño/admin) ===

    def change_status(self, new_status: BookingStatus, at: datetime) -> "Booking":
        """
        Cambio de estado por parte del dueño o un admin.

        - pending -> confirmed solo si el pago está completo.
        - cualquier estado -> cancelled; cancelled_at se fija una sola vez.
        - cancelled -> pending/confirmed reabre la reserva y limpia cancelled_at.
        - Una vez registrado el retiro la reserva queda fija en confirmed.
        """
        new_status = BookingStatus(new_status)
        if new_status == self.status:
            return self
        if self.pickup_confirmed_at is not None:
            raise InvalidBookingTransitionError(
                self.id, f"pasar a {new_status.value}", "el instrumento ya fue retirado"
            )
        if new_status == BookingStatus.CONFIRMED and not self.is_paid:
            raise InvalidBookingTransitionError(
                self.id, "confirmar", "el pago no está completado"
            )
        if new_status == BookingStatus.PENDING and self.status != BookingStatus.CANCELLED:
            raise InvalidBookingTransitionError(
                self.id, "volver a pending", "solo una reserva cancelada puede reabrirse"
            )

        if new_status == BookingStatus.CANCELLED:
            cancelled_at = self.cancelled_at or at
        else:
            cancelled_at = None
        return replace(self, status=new_status, cancelled_at=cancelled_at, updated_at=at)

    # === Transiciones del arrendatario ===

    def cancel_by_renter(self, at: datetime) -> "Booking":
        """Cancelación del arrendatario; una reserva confirmada no se puede autocancelar."""
        if self.is_cancelled:
            return self
        if self.is_confirmed:
            raise InvalidBookingTransitionError(
                self.id, "cancelar", "una reserva confirmada no puede cancelarla el arrendatario"
            )
        return replace(self, status=BookingStatus.CANCELLED, cancelled_at=at, updated_at=at)

    def reschedule(self, date_range: DateRange, quote: PriceQuote, at: datetime) -> "Booking":
        """Cambia las fechas y recalcula el precio; solo antes de pagar."""
        if self.status != BookingStatus.PENDING or self.is_paid:
            raise InvalidBookingTransitionError(
                self.id, "editar", "solo se editan reservas pendientes y sin pagar"
            )
        return replace(
            self,
            pickup_date=date_range.start,
            return_date=date_range.end,
            price=quote.price.amount,
            commission=quote.commission.amount,
            owner_payout=quote.owner_payout.amount,
            updated_at=at,
        )

    # === Pagos ===

    def attach_checkout_session(self, session_id: str, at: datetime) -> "Booking":
        return replace(self, provider_session_id=session_id, updated_at=at)

    def confirm_payment(
        self,
        payment_type: PaymentType,
        event_id: str,
        at: datetime,
        provider_intent_id: str | None = None,
    ) -> "Booking":
        """
        Aplica un cobro confirmado por el proveedor.

        El estado de la reserva no cambia: la confirmación sigue siendo una
        acción separada del dueño. Si el cobro ya estaba aplicado devuelve la
        misma instancia.
        """
        payment_type = PaymentType(payment_type)
        if self.is_payment_settled(payment_type, event_id):
            return self

        if payment_type == PaymentType.LATE_FEE:
            return replace(
                self,
                late_fee_paid=True,
                late_fee_paid_at=at,
                last_webhook_event_id=event_id,
                last_webhook_at=at,
                updated_at=at,
            )

        paid_at = self.paid_at
        if self.status == BookingStatus.PENDING and paid_at is None:
            paid_at = at
        return replace(
            self,
            payment_status=BookingPaymentStatus.PAID,
            paid_at=paid_at,
            provider_intent_id=provider_intent_id or self.provider_intent_id,
            last_webhook_event_id=event_id,
            last_webhook_at=at,
            updated_at=at,
        )

    # === Ciclo de vida físico ===

    def mark_picked_up(self, at: datetime) -> "Booking":
        if not (self.is_confirmed and self.is_paid):
            raise InvalidBookingTransitionError(
                self.id, "marcar retiro", "la reserva debe estar pagada y confirmada"
            )
        if self.pickup_confirmed_at is not None:
            raise InvalidBookingTransitionError(self.id, "marcar retiro", "el retiro ya fue registrado")
        return replace(self, pickup_confirmed_at=at, updated_at=at)

    def mark_returned(self, at: datetime) -> "Booking":
        if self.pickup_confirmed_at is None:
            raise InvalidBookingTransitionError(
                self.id, "marcar devolución", "el retiro no fue registrado"
            )
        if self.return_confirmed_at is not None:
            raise InvalidBookingTransitionError(
                self.id, "marcar devolución", "la devolución ya fue registrada"
            )
        return replace(self, return_confirmed_at=at, updated_at=at)

    def with_late_fee(self, late_days: int, late_fee: Decimal) -> "Booking":
        """Registra el recargo por devolución tardía calculado al devolver."""
        return replace(
            self,
            late_days=late_days,
            late_fee=late_fee,
            late_fee_paid=late_fee == 0,
        )
