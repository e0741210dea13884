from functools import lru_cache
from typing import Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AsyncSessionLocal
from app.application.interfaces.clock import Clock, SystemClock
from app.application.interfaces.uuid_generator import RealUUIDGenerator, UUIDGenerator
from app.application.use_cases.apply_payment_confirmation import ApplyPaymentConfirmationUseCase
from app.application.use_cases.cancel_booking import CancelBookingUseCase
from app.application.use_cases.change_booking_status import ChangeBookingStatusUseCase
from app.application.use_cases.create_booking import CreateBookingUseCase
from app.application.use_cases.get_booking import GetBookingUseCase
from app.application.use_cases.handle_payment_webhook import HandlePaymentWebhookUseCase
from app.application.use_cases.list_bookings import (
    ListOwnerBookingsUseCase,
    ListRenterBookingsUseCase,
)
from app.application.use_cases.list_payments import ListAllPaymentsUseCase, ListMyPaymentsUseCase
from app.application.use_cases.mark_pickup import MarkPickupUseCase
from app.application.use_cases.mark_return import MarkReturnUseCase
from app.application.use_cases.owner_dashboard import OwnerDashboardUseCase
from app.application.use_cases.search_available_instruments import (
    SearchAvailableInstrumentsUseCase,
)
from app.application.use_cases.start_checkout import StartCheckoutUseCase
from app.application.use_cases.sync_payment_status import SyncPaymentStatusUseCase
from app.application.use_cases.update_booking_dates import UpdateBookingDatesUseCase
from app.config import Settings, get_settings
from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.instrument_repo_sql import InstrumentRepoSQL
from app.infrastructure.db.repositories.payment_repo_sql import PaymentRepoSQL
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.gateways.stripe_payment_gateway import StripePaymentGateway
from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.instrument_repo import InMemoryInstrumentRepo
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from app.infrastructure.in_memory.payment_repo import InMemoryPaymentRepo
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


def build_in_memory_bundle(
    clock: Clock | None = None,
    id_generator: UUIDGenerator | None = None,
) -> dict[str, Any]:
    return {
        "booking_repo": InMemoryBookingRepo(),
        "instrument_repo": InMemoryInstrumentRepo(),
        "payment_repo": InMemoryPaymentRepo(),
        "payment_gateway": StubPaymentGateway(),
        "tx_manager": NoopTransactionManager(),
        "clock": clock or SystemClock(),
        "id_generator": id_generator or RealUUIDGenerator(),
    }


@lru_cache(maxsize=1)
def _in_memory_bundle() -> dict[str, Any]:
    return build_in_memory_bundle()


def build_use_cases(bundle: dict[str, Any], settings: Settings) -> dict[str, Any]:
    booking_repo = bundle["booking_repo"]
    instrument_repo = bundle["instrument_repo"]
    payment_repo = bundle["payment_repo"]
    payment_gateway = bundle["payment_gateway"]
    tx_manager = bundle["tx_manager"]
    clock = bundle["clock"]
    id_generator = bundle["id_generator"]

    apply_confirmation = ApplyPaymentConfirmationUseCase(
        booking_repo=booking_repo,
        payment_repo=payment_repo,
        transaction_manager=tx_manager,
        clock=clock,
    )
    return {
        "search_instruments": SearchAvailableInstrumentsUseCase(
            instrument_repo=instrument_repo,
            booking_repo=booking_repo,
            transaction_manager=tx_manager,
        ),
        "create_booking": CreateBookingUseCase(
            booking_repo=booking_repo,
            instrument_repo=instrument_repo,
            transaction_manager=tx_manager,
            clock=clock,
            id_generator=id_generator,
            currency=settings.currency,
            commission_rate=settings.commission_rate,
        ),
        "get_booking": GetBookingUseCase(booking_repo=booking_repo, transaction_manager=tx_manager),
        "list_renter_bookings": ListRenterBookingsUseCase(
            booking_repo=booking_repo, transaction_manager=tx_manager
        ),
        "list_owner_bookings": ListOwnerBookingsUseCase(
            booking_repo=booking_repo, transaction_manager=tx_manager
        ),
        "update_booking_dates": UpdateBookingDatesUseCase(
            booking_repo=booking_repo,
            instrument_repo=instrument_repo,
            transaction_manager=tx_manager,
            clock=clock,
            commission_rate=settings.commission_rate,
        ),
        "change_booking_status": ChangeBookingStatusUseCase(
            booking_repo=booking_repo, transaction_manager=tx_manager, clock=clock
        ),
        "cancel_booking": CancelBookingUseCase(
            booking_repo=booking_repo, transaction_manager=tx_manager, clock=clock
        ),
        "mark_pickup": MarkPickupUseCase(
            booking_repo=booking_repo,
            instrument_repo=instrument_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        "mark_return": MarkReturnUseCase(
            booking_repo=booking_repo,
            instrument_repo=instrument_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        "owner_dashboard": OwnerDashboardUseCase(
            booking_repo=booking_repo, transaction_manager=tx_manager
        ),
        "start_checkout": StartCheckoutUseCase(
            booking_repo=booking_repo,
            payment_repo=payment_repo,
            payment_gateway=payment_gateway,
            transaction_manager=tx_manager,
            clock=clock,
            id_generator=id_generator,
            frontend_url=settings.frontend_url,
            commission_rate=settings.commission_rate,
        ),
        "apply_payment_confirmation": apply_confirmation,
        "handle_webhook": HandlePaymentWebhookUseCase(
            booking_repo=booking_repo,
            payment_repo=payment_repo,
            payment_gateway=payment_gateway,
            apply_confirmation=apply_confirmation,
            transaction_manager=tx_manager,
            clock=clock,
            webhook_secret=settings.stripe_webhook_secret,
        ),
        "sync_payment": SyncPaymentStatusUseCase(
            booking_repo=booking_repo,
            payment_repo=payment_repo,
            payment_gateway=payment_gateway,
            apply_confirmation=apply_confirmation,
            transaction_manager=tx_manager,
        ),
        "list_my_payments": ListMyPaymentsUseCase(
            payment_repo=payment_repo, transaction_manager=tx_manager
        ),
        "list_all_payments": ListAllPaymentsUseCase(
            payment_repo=payment_repo, transaction_manager=tx_manager
        ),
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> dict[str, Any]:
    if settings.use_in_memory:
        return build_use_cases(_in_memory_bundle(), settings)

    if not session:
        raise RuntimeError("DB session not available")

    bundle = {
        "booking_repo": BookingRepoSQL(session),
        "instrument_repo": InstrumentRepoSQL(session),
        "payment_repo": PaymentRepoSQL(session),
        "payment_gateway": StripePaymentGateway(
            api_key=settings.stripe_api_key,
            timeout_seconds=settings.stripe_timeout_seconds,
        ),
        "tx_manager": SQLAlchemyTransactionManager(session),
        "clock": SystemClock(),
        "id_generator": RealUUIDGenerator(),
    }
    return build_use_cases(bundle, settings)
