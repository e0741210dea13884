"""Interface Clock - Puerto para abstracción de tiempo."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Fuente de la hora actual para los casos de uso.

    Toda marca de tiempo que el motor guarda (paid_at, cancelled_at,
    pickup_confirmed_at, etc.) sale de aquí, siempre en UTC.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Hora actual timezone-aware en UTC."""
        raise NotImplementedError


class SystemClock(Clock):
    """Reloj del sistema."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FakeClock(Clock):
    """
    Reloj fijo para tests.

    Permite simular retiros y devoluciones en fechas concretas sin esperar.
    """

    def __init__(self, fixed_time: datetime | None = None):
        fixed_time = fixed_time or datetime.now(timezone.utc)
        if fixed_time.tzinfo is None:
            fixed_time = fixed_time.replace(tzinfo=timezone.utc)
        self._fixed_time = fixed_time

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, new_time: datetime) -> None:
        if new_time.tzinfo is None:
            new_time = new_time.replace(tzinfo=timezone.utc)
        self._fixed_time = new_time

    def advance(self, seconds: int = 0, minutes: int = 0, hours: int = 0, days: int = 0) -> None:
        """Avanza el reloj el intervalo indicado."""
        self._fixed_time += timedelta(seconds=seconds, minutes=minutes, hours=hours, days=days)
