from app.application.dtos.booking_dto import MAX_PAGE_SIZE, BookingFilters, OwnerDashboardDTO
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.booking import BookingStatus
from app.domain.errors import ForbiddenActionError
from app.domain.value_objects.actor import Actor

RECENT_BOOKINGS = 3


class OwnerDashboardUseCase:
    """
    Contadores del dueño: total, pendientes, confirmadas, ingresos (suma
    del precio de las confirmadas) y las tres reservas más recientes.
    """

    def __init__(self, booking_repo: BookingRepo, transaction_manager: TransactionManager) -> None:
        self._booking_repo = booking_repo
        self._tx = transaction_manager

    async def execute(self, actor: Actor) -> OwnerDashboardDTO:
        if not actor.can_manage_bookings:
            raise ForbiddenActionError(actor.user_id, "ver el tablero de dueño")

        dashboard = OwnerDashboardDTO()
        page = 1
        async with self._tx.start():
            while True:
                filters = BookingFilters(page=page, limit=MAX_PAGE_SIZE)
                items, total = await self._booking_repo.list_by_owner(actor.user_id, filters)
                if page == 1:
                    dashboard.total_bookings = total
                    dashboard.recent_bookings = items[:RECENT_BOOKINGS]
                for booking in items:
                    if booking.status == BookingStatus.PENDING:
                        dashboard.pending_bookings += 1
                    elif booking.status == BookingStatus.CONFIRMED:
                        dashboard.confirmed_bookings += 1
                        dashboard.revenue += booking.price
                if page * MAX_PAGE_SIZE >= total:
                    break
                page += 1

        return dashboard
