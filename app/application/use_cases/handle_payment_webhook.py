import logging

from pydantic import ValidationError as PydanticValidationError

from app.api.schemas.payments import CheckoutSessionObject, StripeWebhookEnvelope
from app.application.dtos.payment_dto import WebhookResultDTO
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.apply_payment_confirmation import ApplyPaymentConfirmationUseCase
from app.domain.entities.payment import PaymentKey, PaymentType
from app.domain.errors import (
    BookingNotFoundError,
    InvalidPaymentTransitionError,
    ValidationError,
)

PAID_EVENTS = frozenset(
    {"checkout.session.completed", "checkout.session.async_payment_succeeded"}
)
FAILED_EVENTS = frozenset(
    {"checkout.session.expired", "checkout.session.async_payment_failed"}
)


class HandlePaymentWebhookUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_repo: PaymentRepo,
        payment_gateway: PaymentGateway,
        apply_confirmation: ApplyPaymentConfirmationUseCase,
        transaction_manager: TransactionManager,
        clock: Clock,
        webhook_secret: str | None,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_repo = payment_repo
        self._payment_gateway = payment_gateway
        self._apply_confirmation = apply_confirmation
        self._tx = transaction_manager
        self._clock = clock
        self._webhook_secret = webhook_secret
        self._logger = logging.getLogger(__name__)

    async def execute(self, raw_body: bytes, signature: str | None) -> WebhookResultDTO:
        if not raw_body:
            raise ValidationError("body", "el webhook llegó vacío")

        # Lanza WebhookSignatureError / ProviderNotConfiguredError
        event_dict = await self._payment_gateway.parse_webhook_event(
            payload=raw_body,
            signature_header=signature,
            webhook_secret=self._webhook_secret,
        )
        try:
            event = StripeWebhookEnvelope.model_validate(event_dict)
        except PydanticValidationError as exc:
            raise ValidationError("event", str(exc)) from exc

        if event.type not in PAID_EVENTS | FAILED_EVENTS:
            self._logger.info(
                "Webhook event ignored",
                extra={"event_id": event.id, "event_type": event.type},
            )
            return WebhookResultDTO(event_id=event.id, event_type=event.type, handled=False)

        session = event.checkout_session()
        booking_id = session.metadata.get("bookingId")
        if not booking_id:
            self._logger.warning(
                "Webhook session without bookingId metadata",
                extra={"event_id": event.id, "session_id": session.id},
            )
            return WebhookResultDTO(event_id=event.id, event_type=event.type, handled=False)
        try:
            payment_type = PaymentType(session.metadata.get("paymentType") or PaymentType.RENTAL)
        except ValueError as exc:
            raise ValidationError("paymentType", str(exc)) from exc

        if event.type in FAILED_EVENTS:
            return await self._handle_failed(event, session, booking_id, payment_type)

        if session.payment_status != "paid":
            self._logger.info(
                "Checkout session not paid yet; waiting",
                extra={
                    "event_id": event.id,
                    "booking_id": booking_id,
                    "payment_status": session.payment_status,
                },
            )
            return WebhookResultDTO(
                event_id=event.id,
                event_type=event.type,
                handled=True,
                booking_id=booking_id,
                payment_type=payment_type,
            )

        try:
            result = await self._apply_confirmation.execute(
                booking_id=booking_id,
                payment_type=payment_type,
                event_id=event.id,
                provider_intent_id=session.payment_intent,
            )
        except BookingNotFoundError:
            self._logger.error(
                "Webhook for unknown booking",
                extra={"event_id": event.id, "booking_id": booking_id},
            )
            return WebhookResultDTO(event_id=event.id, event_type=event.type, handled=False)
        if not result.applied:
            self._logger.warning(
                "Duplicate webhook delivery ignored",
                extra={"event_id": event.id, "booking_id": booking_id},
            )
        return WebhookResultDTO(
            event_id=event.id,
            event_type=event.type,
            handled=True,
            applied=result.applied,
            booking_id=booking_id,
            payment_type=payment_type,
        )

    async def _handle_failed(
        self,
        event: StripeWebhookEnvelope,
        session: CheckoutSessionObject,
        booking_id: str,
        payment_type: PaymentType,
    ) -> WebhookResultDTO:
        async with self._tx.start():
            booking = await self._booking_repo.get(booking_id)
            if booking is None:
                self._logger.error(
                    "Webhook for unknown booking",
                    extra={"event_id": event.id, "booking_id": booking_id},
                )
                return WebhookResultDTO(event_id=event.id, event_type=event.type, handled=False)
            key = PaymentKey(booking_id=booking.id, user_id=booking.renter_id, type=payment_type)
            current = await self._payment_repo.get_by_key(key)
            if current is not None and current.provider_session_id != session.id:
                self._logger.warning(
                    "Failure event for a superseded checkout session; ignored",
                    extra={
                        "event_id": event.id,
                        "booking_id": booking_id,
                        "session_id": session.id,
                        "current_session_id": current.provider_session_id,
                    },
                )
                return WebhookResultDTO(
                    event_id=event.id,
                    event_type=event.type,
                    handled=True,
                    booking_id=booking_id,
                    payment_type=payment_type,
                )
            try:
                payment = await self._payment_repo.mark_failed(key, at=self._clock.now())
            except InvalidPaymentTransitionError:
                self._logger.warning(
                    "Failure event for an already settled payment",
                    extra={"event_id": event.id, "booking_id": booking_id},
                )
                payment = None

        self._logger.warning(
            "Checkout session failed",
            extra={
                "event_id": event.id,
                "booking_id": booking_id,
                "session_id": session.id,
                "payment_type": payment_type.value,
            },
        )
        return WebhookResultDTO(
            event_id=event.id,
            event_type=event.type,
            handled=True,
            applied=payment is not None,
            booking_id=booking_id,
            payment_type=payment_type,
        )
