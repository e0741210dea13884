from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_access import ensure_party, require_booking
from app.domain.entities.booking import Booking
from app.domain.value_objects.actor import Actor


class GetBookingUseCase:
    def __init__(self, booking_repo: BookingRepo, transaction_manager: TransactionManager) -> None:
        self._booking_repo = booking_repo
        self._tx = transaction_manager

    async def execute(self, booking_id: str, actor: Actor) -> Booking:
        async with self._tx.start():
            booking = await require_booking(self._booking_repo, booking_id)
        ensure_party(booking, actor, "ver esta reserva")
        return booking
