from app.application.dtos.booking_dto import BookingFilters, Page
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.booking import Booking
from app.domain.errors import ForbiddenActionError
from app.domain.value_objects.actor import Actor

SCOPE_MINE = "mine"
SCOPE_ALL = "all"


class ListRenterBookingsUseCase:
    """Reservas hechas por el usuario, más recientes primero."""

    def __init__(self, booking_repo: BookingRepo, transaction_manager: TransactionManager) -> None:
        self._booking_repo = booking_repo
        self._tx = transaction_manager

    async def execute(self, actor: Actor, filters: BookingFilters) -> Page[Booking]:
        async with self._tx.start():
            items, total = await self._booking_repo.list_by_renter(actor.user_id, filters)
        return Page(items=items, page=filters.page, limit=filters.limit, total=total)


class ListOwnerBookingsUseCase:
    """
    Reservas de los instrumentos del dueño.

    Un admin ve todas por defecto; con scope="mine" solo las propias.
    """

    def __init__(self, booking_repo: BookingRepo, transaction_manager: TransactionManager) -> None:
        self._booking_repo = booking_repo
        self._tx = transaction_manager

    async def execute(
        self,
        actor: Actor,
        filters: BookingFilters,
        scope: str | None = None,
    ) -> Page[Booking]:
        if not actor.can_manage_bookings:
            raise ForbiddenActionError(actor.user_id, "listar reservas de dueño")

        owner_id: str | None = actor.user_id
        if actor.is_admin and (scope or SCOPE_ALL) == SCOPE_ALL:
            owner_id = None

        async with self._tx.start():
            items, total = await self._booking_repo.list_by_owner(owner_id, filters)
        return Page(items=items, page=filters.page, limit=filters.limit, total=total)
