"""Entidad Payment - entrada del libro de pagos de una reserva."""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum

from app.domain.errors import InvalidPaymentTransitionError, ValidationError
from app.domain.value_objects.date_range import as_utc
from app.domain.value_objects.money import Money


class PaymentStatus(str, Enum):
    """Estados posibles de un pago."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PaymentType(str, Enum):
    """Tipo de cobro: la renta inicial o el recargo por devolución tardía."""

    RENTAL = "rental"
    LATE_FEE = "late_fee"


@dataclass(frozen=True)
class PaymentKey:
    """Clave única del libro: a lo sumo un pago por (reserva, usuario, tipo)."""

    booking_id: str
    user_id: str
    type: PaymentType

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", PaymentType(self.type))


@dataclass(frozen=True)
class Payment:
    """
    Intento de cobro asociado a una reserva.

    El status solo avanza pending -> succeeded | failed a través del motor de
    conciliación; repetir la transición al mismo estado no cambia nada.
    """

    # Identificadores
    id: str
    booking_id: str
    user_id: str
    type: PaymentType

    # Monto
    amount: int  # unidades menores (centavos)
    display_amount: Decimal
    currency: str
    commission: Decimal
    owner_payout: Decimal

    # Proveedor
    provider_session_id: str | None = None
    provider_intent_id: str | None = None

    # Estado
    status: PaymentStatus = PaymentStatus.PENDING
    paid_at: datetime | None = None

    # Timestamps
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", PaymentType(self.type))
        object.__setattr__(self, "status", PaymentStatus(self.status))
        for name in ("paid_at", "created_at", "updated_at"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, as_utc(value))
        if self.amount < 0:
            raise ValidationError("amount", "no puede ser negativo")
        if self.commission + self.owner_payout != self.display_amount:
            raise ValidationError("commission", "commission + owner_payout debe ser igual al monto")

    # === Propiedades ===

    @property
    def key(self) -> PaymentKey:
        return PaymentKey(booking_id=self.booking_id, user_id=self.user_id, type=self.type)

    @property
    def money(self) -> Money:
        return Money(amount=self.display_amount, currency_code=self.currency)

    @property
    def is_successful(self) -> bool:
        return self.status == PaymentStatus.SUCCEEDED

    # === Métodos de negocio ===

    def mark_succeeded(self, provider_intent_id: str | None, paid_at: datetime) -> "Payment":
        """Marca el pago como cobrado; no-op si ya lo estaba."""
        if self.is_successful:
            return self
        return replace(
            self,
            status=PaymentStatus.SUCCEEDED,
            provider_intent_id=provider_intent_id or self.provider_intent_id,
            paid_at=paid_at,
            updated_at=paid_at,
        )

    def mark_failed(self, at: datetime) -> "Payment":
        """Marca el pago como fallido; un pago cobrado no puede fallar."""
        if self.status == PaymentStatus.FAILED:
            return self
        if self.is_successful:
            raise InvalidPaymentTransitionError(self.status.value, PaymentStatus.FAILED.value)
        return replace(self, status=PaymentStatus.FAILED, updated_at=at)

    @classmethod
    def open(
        cls,
        payment_id: str,
        key: PaymentKey,
        total: Money,
        commission: Money,
        owner_payout: Money,
        provider_session_id: str | None,
        created_at: datetime,
    ) -> "Payment":
        """Factory para crear un pago pendiente."""
        return cls(
            id=payment_id,
            booking_id=key.booking_id,
            user_id=key.user_id,
            type=key.type,
            amount=total.to_minor_units(),
            display_amount=total.amount,
            currency=total.currency_code,
            commission=commission.amount,
            owner_payout=owner_payout.amount,
            provider_session_id=provider_session_id,
            status=PaymentStatus.PENDING,
            created_at=created_at,
            updated_at=created_at,
        )

    def reopen(self, draft: "Payment") -> "Payment":
        """Sobrescribe un borrador existente con un checkout nuevo conservando su id."""
        return replace(draft, id=self.id, created_at=self.created_at)
