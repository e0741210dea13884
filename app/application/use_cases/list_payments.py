from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.payment import Payment, PaymentStatus, PaymentType
from app.domain.errors import ForbiddenActionError
from app.domain.value_objects.actor import Actor


class ListMyPaymentsUseCase:
    def __init__(self, payment_repo: PaymentRepo, transaction_manager: TransactionManager) -> None:
        self._payment_repo = payment_repo
        self._tx = transaction_manager

    async def execute(self, actor: Actor, payment_type: PaymentType | None = None) -> list[Payment]:
        async with self._tx.start():
            return list(await self._payment_repo.list_by_user(actor.user_id, payment_type))


class ListAllPaymentsUseCase:
    """Libro de pagos completo; solo admins."""

    def __init__(self, payment_repo: PaymentRepo, transaction_manager: TransactionManager) -> None:
        self._payment_repo = payment_repo
        self._tx = transaction_manager

    async def execute(
        self,
        actor: Actor,
        payment_type: PaymentType | None = None,
        status: PaymentStatus | None = None,
    ) -> list[Payment]:
        if not actor.is_admin:
            raise ForbiddenActionError(actor.user_id, "ver todos los pagos")
        async with self._tx.start():
            return list(await self._payment_repo.list_all(payment_type, status))
