"""Value Object DateRange - rango de fechas pickup/return de una reserva."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from app.domain.errors import InvalidDateRangeError

ONE_DAY = timedelta(days=1)


def as_utc(value: datetime) -> datetime:
    """Normaliza un datetime a UTC (los naive se asumen UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ceil_days(delta: timedelta) -> int:
    """Días completos que cubre un intervalo; cualquier fracción cuenta como día."""
    return math.ceil(delta / ONE_DAY)


@dataclass(frozen=True)
class DateRange:
    """
    Value Object inmutable que representa el rango de una reserva.

    Attributes:
        start: Fecha/hora de retiro (pickup).
        end: Fecha/hora de devolución planificada (return).
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", as_utc(self.start))
        object.__setattr__(self, "end", as_utc(self.end))
        if self.end <= self.start:
            raise InvalidDateRangeError(
                f"return_date debe ser posterior a pickup_date: {self.start} >= {self.end}"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def rental_days(self) -> int:
        """
        Calcula los días de renta.

        Regla de negocio: cualquier fracción de día cuenta como día completo,
        con un mínimo de 1 día.
        """
        return max(1, ceil_days(self.duration))

    def overlaps_with(self, other: "DateRange") -> bool:
        """
        Verifica si este rango choca con otro.

        La comparación es de intervalo cerrado: una devolución y un retiro el
        mismo instante se consideran superpuestos.
        """
        return other.start <= self.end and other.end >= self.start

    def contains(self, dt: datetime) -> bool:
        return self.start <= as_utc(dt) <= self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"

    @classmethod
    def from_datetimes(cls, pickup: datetime, return_: datetime) -> "DateRange":
        """Factory method para crear desde pickup y return."""
        return cls(start=pickup, end=return_)
