from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.api.schemas.bookings import BookingResponse
from app.domain.entities.payment import PaymentStatus, PaymentType


class StartCheckoutRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    payment_type: PaymentType = PaymentType.RENTAL


class CheckoutResponse(BaseModel):
    booking_id: str
    payment_type: PaymentType
    session_id: str
    url: str | None = None


class SyncPaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    payment_type: PaymentType = PaymentType.RENTAL


class SyncPaymentResponse(BaseModel):
    payment_type: PaymentType
    payment_status: str
    applied: bool
    booking: BookingResponse


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    booking_id: str
    user_id: str
    type: PaymentType
    amount: int
    display_amount: Decimal
    currency: str
    commission: Decimal
    owner_payout: Decimal
    provider_session_id: str | None = None
    provider_intent_id: str | None = None
    status: PaymentStatus
    paid_at: datetime | None = None
    created_at: datetime | None = None


class WebhookAckResponse(BaseModel):
    received: bool = True
    handled: bool
    applied: bool = False


class CheckoutSessionObject(BaseModel):
    """Campos de checkout.session que usa la conciliación."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    payment_status: str | None = None
    payment_intent: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class StripeWebhookEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    data: dict[str, Any] = Field(default_factory=dict)
    livemode: bool | None = None
    created: int | None = None

    def checkout_session(self) -> CheckoutSessionObject:
        return CheckoutSessionObject.model_validate(self.data.get("object") or {})
