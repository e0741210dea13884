from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from app.api.dependencies import get_use_cases
from app.api.schemas.bookings import BookingResponse
from app.api.schemas.payments import (
    CheckoutResponse,
    PaymentResponse,
    StartCheckoutRequest,
    SyncPaymentRequest,
    SyncPaymentResponse,
    WebhookAckResponse,
)
from app.api.security import get_actor
from app.domain.entities.payment import PaymentStatus, PaymentType
from app.domain.value_objects.actor import Actor

router = APIRouter()

UseCases = Annotated[dict, Depends(get_use_cases)]
CurrentActor = Annotated[Actor, Depends(get_actor)]


@router.post(
    "/bookings/{booking_id}/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_checkout(
    booking_id: str,
    actor: CurrentActor,
    use_cases: UseCases,
    payload: StartCheckoutRequest | None = None,
) -> CheckoutResponse:
    payment_type = payload.payment_type if payload else PaymentType.RENTAL
    result = await use_cases["start_checkout"].execute(
        booking_id=booking_id, actor=actor, payment_type=payment_type
    )
    return CheckoutResponse(
        booking_id=result.booking.id,
        payment_type=payment_type,
        session_id=result.session_id,
        url=result.url,
    )


@router.post("/bookings/{booking_id}/payments/sync", response_model=SyncPaymentResponse)
async def sync_payment(
    booking_id: str,
    actor: CurrentActor,
    use_cases: UseCases,
    payload: SyncPaymentRequest | None = None,
) -> SyncPaymentResponse:
    payment_type = payload.payment_type if payload else PaymentType.RENTAL
    result = await use_cases["sync_payment"].execute(
        booking_id=booking_id, actor=actor, payment_type=payment_type
    )
    return SyncPaymentResponse(
        payment_type=result.payment_type,
        payment_status=result.payment_status,
        applied=result.applied,
        booking=BookingResponse.model_validate(result.booking),
    )


@router.get("/payments/me", response_model=list[PaymentResponse])
async def list_my_payments(
    actor: CurrentActor,
    use_cases: UseCases,
    type: PaymentType | None = None,
) -> list[PaymentResponse]:
    payments = await use_cases["list_my_payments"].execute(actor=actor, payment_type=type)
    return [PaymentResponse.model_validate(p) for p in payments]


@router.get("/payments", response_model=list[PaymentResponse])
async def list_all_payments(
    actor: CurrentActor,
    use_cases: UseCases,
    type: PaymentType | None = None,
    status: PaymentStatus | None = None,
) -> list[PaymentResponse]:
    payments = await use_cases["list_all_payments"].execute(
        actor=actor, payment_type=type, status=status
    )
    return [PaymentResponse.model_validate(p) for p in payments]


@router.post("/webhooks/stripe", response_model=WebhookAckResponse)
async def stripe_webhook(request: Request, use_cases: UseCases) -> WebhookAckResponse:
    raw_body = await request.body()
    signature = request.headers.get("Stripe-Signature")
    result = await use_cases["handle_webhook"].execute(raw_body=raw_body, signature=signature)
    return WebhookAckResponse(handled=result.handled, applied=result.applied)
