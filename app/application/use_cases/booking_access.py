"""Reglas de acceso compartidas por los casos de uso de reservas."""

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import Booking
from app.domain.errors import BookingNotFoundError, ForbiddenActionError
from app.domain.value_objects.actor import Actor


async def require_booking(booking_repo: BookingRepo, booking_id: str) -> Booking:
    booking = await booking_repo.get(booking_id)
    if booking is None:
        raise BookingNotFoundError(booking_id)
    return booking


def ensure_party(booking: Booking, actor: Actor, action: str) -> None:
    """Arrendatario, dueño o admin."""
    if actor.is_admin or booking.is_party(actor.user_id):
        return
    raise ForbiddenActionError(actor.user_id, action)


def ensure_renter(booking: Booking, actor: Actor, action: str) -> None:
    if booking.renter_id != actor.user_id:
        raise ForbiddenActionError(actor.user_id, action)


def ensure_manager(booking: Booking, actor: Actor, action: str) -> None:
    """El dueño de la reserva o un admin."""
    if actor.is_admin:
        return
    if actor.can_manage_bookings and booking.owner_id == actor.user_id:
        return
    raise ForbiddenActionError(actor.user_id, action)
