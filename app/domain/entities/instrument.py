"""Entidad Instrument - vista del catálogo que necesita el motor de reservas."""

from dataclasses import dataclass, replace
from decimal import Decimal


@dataclass(frozen=True)
class Instrument:
    """
    Instrumento publicado por un dueño.

    El catálogo lo administra otro servicio; el motor solo lee el precio, el
    dueño y la disponibilidad, y cambia is_available al retirar/devolver.
    """

    id: str
    owner_id: str
    price_per_day: Decimal
    is_available: bool = True
    brand: str = ""
    model: str = ""
    category: str = ""
    location: str = ""

    def with_availability(self, is_available: bool) -> "Instrument":
        return replace(self, is_available=is_available)

    def matches(self, location: str | None = None, query: str | None = None) -> bool:
        """Filtro por ubicación y texto libre (marca, modelo, categoría, ubicación)."""
        if location and location.strip().lower() not in self.location.lower():
            return False
        if query:
            needle = query.strip().lower()
            haystack = (self.brand, self.model, self.category, self.location)
            return any(needle in field.lower() for field in haystack)
        return True
