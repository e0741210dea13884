"""Recargo por devolución tardía."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from app.domain.errors import InvalidMoneyError
from app.domain.value_objects.date_range import as_utc, ceil_days


@dataclass(frozen=True)
class LateFeeAssessment:
    late_days: int
    late_fee: Decimal

    @property
    def is_due(self) -> bool:
        return self.late_fee > 0


def assess_late_fee(
    planned_return: datetime,
    actual_return: datetime,
    price_per_day: Decimal,
) -> LateFeeAssessment:
    """
    Calcula días de atraso y recargo.

    late_days = ceil((actual - planned) / 1 día) si actual > planned, si no 0.
    late_fee = late_days * price_per_day.
    """
    planned = as_utc(planned_return)
    actual = as_utc(actual_return)
    if actual <= planned:
        return LateFeeAssessment(late_days=0, late_fee=Decimal("0"))

    rate = Decimal(str(price_per_day))
    if rate <= 0:
        raise InvalidMoneyError(f"price_per_day debe ser positivo: {price_per_day}")
    late_days = ceil_days(actual - planned)
    return LateFeeAssessment(late_days=late_days, late_fee=rate * late_days)
