"""Implementaciones in-memory para desarrollo y testing."""

from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.instrument_repo import InMemoryInstrumentRepo
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from app.infrastructure.in_memory.payment_repo import InMemoryPaymentRepo
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager

__all__ = [
    # Repositories
    "InMemoryBookingRepo",
    "InMemoryInstrumentRepo",
    "InMemoryPaymentRepo",
    # Gateways
    "StubPaymentGateway",
    # Infrastructure
    "NoopTransactionManager",
]
