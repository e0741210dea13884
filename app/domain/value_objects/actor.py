"""Value Object Actor - identidad ya resuelta de quien invoca una operación."""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Roles que reconoce el motor de reservas."""

    RENTER = "renter"
    OWNER = "owner"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """
    Usuario que invoca la operación.

    La autenticación ocurre antes de llegar al núcleo; aquí solo se codifican
    las reglas de autorización (dueño, arrendatario o admin).
    """

    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def can_manage_bookings(self) -> bool:
        """Dueños y admins pueden cambiar estados y marcar retiro/devolución."""
        return self.role in (Role.OWNER, Role.ADMIN)
