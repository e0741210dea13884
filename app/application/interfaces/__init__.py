"""Interfaces (Puertos) de la capa de aplicación."""

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock, FakeClock, SystemClock
from app.application.interfaces.instrument_repo import InstrumentRepo
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import (
    FakeUUIDGenerator,
    RealUUIDGenerator,
    UUIDGenerator,
)

__all__ = [
    # Repositories
    "BookingRepo",
    "InstrumentRepo",
    "PaymentRepo",
    # Gateways
    "PaymentGateway",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "UUIDGenerator",
    "RealUUIDGenerator",
    "FakeUUIDGenerator",
]
