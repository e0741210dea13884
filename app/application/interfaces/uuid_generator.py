"""Interface UUIDGenerator - Puerto para generación de identificadores."""

import uuid
from abc import ABC, abstractmethod


class UUIDGenerator(ABC):
    """Genera los ids de reservas y pagos; inyectable para tests deterministas."""

    @abstractmethod
    def generate_booking_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def generate_payment_id(self) -> str:
        raise NotImplementedError


class RealUUIDGenerator(UUIDGenerator):
    """UUID v4 aleatorios."""

    def generate_booking_id(self) -> str:
        return str(uuid.uuid4())

    def generate_payment_id(self) -> str:
        return str(uuid.uuid4())


class FakeUUIDGenerator(UUIDGenerator):
    """
    Ids predecibles basados en contador.

    Ejemplo: FakeUUIDGenerator("t") genera "t-booking-0001", "t-payment-0001", ...
    """

    def __init__(self, prefix: str = "test"):
        self._prefix = prefix
        self._booking_counter = 0
        self._payment_counter = 0

    def generate_booking_id(self) -> str:
        self._booking_counter += 1
        return f"{self._prefix}-booking-{self._booking_counter:04d}"

    def generate_payment_id(self) -> str:
        self._payment_counter += 1
        return f"{self._prefix}-payment-{self._payment_counter:04d}"

    def reset(self) -> None:
        self._booking_counter = 0
        self._payment_counter = 0
