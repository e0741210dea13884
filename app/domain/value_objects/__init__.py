"""Value Objects del dominio de reservas."""

from app.domain.value_objects.actor import Actor, Role
from app.domain.value_objects.date_range import DateRange
from app.domain.value_objects.money import Money

__all__ = [
    "Actor",
    "DateRange",
    "Money",
    "Role",
]
