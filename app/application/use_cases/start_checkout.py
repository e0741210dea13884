import logging
from decimal import Decimal

from app.application.dtos.payment_dto import StartCheckoutResultDTO
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import UUIDGenerator
from app.application.use_cases.booking_access import ensure_renter, require_booking
from app.domain.entities.booking import Booking
from app.domain.entities.payment import Payment, PaymentKey, PaymentType
from app.domain.errors import InvalidBookingTransitionError, PaymentAlreadySettledError
from app.domain.services.pricing import DEFAULT_COMMISSION_RATE, split_commission
from app.domain.value_objects.actor import Actor
from app.domain.value_objects.money import Money


class StartCheckoutUseCase:
    """
    Abre una sesión de checkout en el proveedor para la renta o el recargo
    por atraso y deja el borrador en el libro de pagos.

    La llamada al proveedor ocurre fuera de la transacción.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_repo: PaymentRepo,
        payment_gateway: PaymentGateway,
        transaction_manager: TransactionManager,
        clock: Clock,
        id_generator: UUIDGenerator,
        frontend_url: str,
        commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_repo = payment_repo
        self._payment_gateway = payment_gateway
        self._tx = transaction_manager
        self._clock = clock
        self._id_generator = id_generator
        self._frontend_url = frontend_url.rstrip("/")
        self._commission_rate = commission_rate
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        booking_id: str,
        actor: Actor,
        payment_type: PaymentType = PaymentType.RENTAL,
    ) -> StartCheckoutResultDTO:
        payment_type = PaymentType(payment_type)

        async with self._tx.start():
            booking = await require_booking(self._booking_repo, booking_id)
            ensure_renter(booking, actor, "pagar esta reserva")
            total = self._amount_due(booking, payment_type)
            key = PaymentKey(booking_id=booking.id, user_id=booking.renter_id, type=payment_type)
            existing = await self._payment_repo.get_by_key(key)
            if existing is not None and existing.is_successful:
                raise PaymentAlreadySettledError(booking.id, payment_type.value)

        session = await self._payment_gateway.create_checkout_session(
            amount_minor=total.to_minor_units(),
            currency=total.currency_code,
            description=self._description(booking, payment_type),
            metadata={"bookingId": booking.id, "paymentType": payment_type.value},
            success_url=f"{self._frontend_url}/payment?success=true&bookingId={booking.id}",
            cancel_url=f"{self._frontend_url}/payment?canceled=true&bookingId={booking.id}",
        )

        now = self._clock.now()
        commission, owner_payout = split_commission(total, self._commission_rate)
        draft = Payment.open(
            payment_id=self._id_generator.generate_payment_id(),
            key=key,
            total=total,
            commission=commission,
            owner_payout=owner_payout,
            provider_session_id=session.session_id,
            created_at=now,
        )

        async with self._tx.start():
            payment = await self._payment_repo.open_payment(draft)
            if payment_type == PaymentType.RENTAL:
                current = await require_booking(self._booking_repo, booking.id)
                booking = await self._booking_repo.update(
                    current.attach_checkout_session(session.session_id, at=now),
                    expected_version=current.version,
                )

        self._logger.info(
            "Checkout session created",
            extra={
                "booking_id": booking.id,
                "payment_type": payment_type.value,
                "session_id": session.session_id,
                "amount_minor": payment.amount,
            },
        )
        return StartCheckoutResultDTO(
            booking=booking,
            payment=payment,
            session_id=session.session_id,
            url=session.url,
        )

    def _amount_due(self, booking: Booking, payment_type: PaymentType) -> Money:
        if payment_type == PaymentType.LATE_FEE:
            if booking.return_confirmed_at is None:
                raise InvalidBookingTransitionError(
                    booking.id, "cobrar recargo", "la devolución no fue registrada"
                )
            if booking.late_fee <= 0:
                raise InvalidBookingTransitionError(
                    booking.id, "cobrar recargo", "no hay recargo pendiente"
                )
            if booking.late_fee_paid:
                raise PaymentAlreadySettledError(booking.id, payment_type.value)
            return Money(amount=booking.late_fee, currency_code=booking.currency)

        if booking.is_paid:
            raise PaymentAlreadySettledError(booking.id, payment_type.value)
        if booking.is_cancelled:
            raise InvalidBookingTransitionError(booking.id, "pagar", "la reserva está cancelada")
        return booking.price_money

    def _description(self, booking: Booking, payment_type: PaymentType) -> str:
        if payment_type == PaymentType.LATE_FEE:
            return f"Late return fee for booking {booking.id} ({booking.late_days} days)"
        return f"Instrument rental for booking {booking.id}"
