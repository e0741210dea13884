"""Data Transfer Objects de la capa de aplicación."""

from app.application.dtos.booking_dto import BookingFilters, OwnerDashboardDTO, Page
from app.application.dtos.payment_dto import (
    CheckoutSessionDTO,
    PaymentConfirmationDTO,
    ProviderSessionDTO,
    StartCheckoutResultDTO,
    SyncResultDTO,
    WebhookResultDTO,
)

__all__ = [
    # Booking DTOs
    "BookingFilters",
    "OwnerDashboardDTO",
    "Page",
    # Payment DTOs
    "CheckoutSessionDTO",
    "PaymentConfirmationDTO",
    "ProviderSessionDTO",
    "StartCheckoutResultDTO",
    "SyncResultDTO",
    "WebhookResultDTO",
]
