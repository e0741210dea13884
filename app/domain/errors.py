"""Excepciones de dominio para el motor de reservas y pagos."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de "no encontrado" ===


class BookingNotFoundError(DomainError):
    """La reserva no existe."""

    def __init__(self, booking_id: str):
        super().__init__(
            message=f"Reserva no encontrada: {booking_id}",
            code="BOOKING_NOT_FOUND",
        )
        self.booking_id = booking_id


class InstrumentNotFoundError(DomainError):
    """El instrumento no existe."""

    def __init__(self, instrument_id: str):
        super().__init__(
            message=f"Instrumento no encontrado: {instrument_id}",
            code="INSTRUMENT_NOT_FOUND",
        )
        self.instrument_id = instrument_id


class PaymentNotFoundError(DomainError):
    """No existe un registro de pago para la reserva y tipo indicados."""

    def __init__(self, booking_id: str, payment_type: str):
        super().__init__(
            message=f"Pago '{payment_type}' no encontrado para la reserva {booking_id}",
            code="PAYMENT_NOT_FOUND",
        )
        self.booking_id = booking_id
        self.payment_type = payment_type


# === Errores de autorización ===


class ForbiddenActionError(DomainError):
    """El actor no es el arrendatario, dueño o admin del recurso."""

    def __init__(self, user_id: str, action: str):
        super().__init__(
            message=f"El usuario {user_id} no puede {action}",
            code="FORBIDDEN",
        )
        self.user_id = user_id
        self.action = action


# === Transiciones inválidas ===


class InvalidBookingTransitionError(DomainError):
    """El estado de la reserva no permite la operación."""

    def __init__(self, booking_id: str | None, operation: str, reason: str):
        super().__init__(
            message=f"No se puede {operation} la reserva {booking_id}: {reason}",
            code="INVALID_BOOKING_TRANSITION",
        )
        self.booking_id = booking_id
        self.operation = operation
        self.reason = reason


class InvalidPaymentTransitionError(DomainError):
    """El estado del pago no permite la operación."""

    def __init__(self, current_status: str, target_status: str):
        super().__init__(
            message=f"No se puede pasar un pago de '{current_status}' a '{target_status}'",
            code="INVALID_PAYMENT_TRANSITION",
        )
        self.current_status = current_status
        self.target_status = target_status


# === Conflictos ===


class BookingOverlapError(DomainError):
    """Ya existe una reserva activa que se superpone con el rango pedido."""

    def __init__(self, instrument_id: str, conflicting_booking_ids: list[str]):
        super().__init__(
            message=f"El instrumento {instrument_id} no está disponible en esas fechas",
            code="BOOKING_OVERLAP",
        )
        self.instrument_id = instrument_id
        self.conflicting_booking_ids = conflicting_booking_ids


class InstrumentUnavailableError(DomainError):
    """El instrumento está marcado como no disponible."""

    def __init__(self, instrument_id: str):
        super().__init__(
            message=f"Instrumento no disponible: {instrument_id}",
            code="INSTRUMENT_UNAVAILABLE",
        )
        self.instrument_id = instrument_id


class PaymentAlreadySettledError(DomainError):
    """El pago ya fue cobrado; no se puede abrir otro checkout."""

    def __init__(self, booking_id: str, payment_type: str):
        super().__init__(
            message=f"El pago '{payment_type}' de la reserva {booking_id} ya fue cobrado",
            code="PAYMENT_ALREADY_SETTLED",
        )
        self.booking_id = booking_id
        self.payment_type = payment_type


class OptimisticLockError(DomainError):
    """Conflicto de concurrencia al actualizar la reserva."""

    def __init__(self, booking_id: str, expected_version: int):
        super().__init__(
            message=f"Conflicto de concurrencia en reserva {booking_id}: "
            f"versión esperada {expected_version}",
            code="OPTIMISTIC_LOCK_ERROR",
        )
        self.booking_id = booking_id
        self.expected_version = expected_version


# === Errores del proveedor de pagos ===


class PaymentProviderError(DomainError):
    """Falla del proveedor de pagos (red, timeout, sesión inválida)."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message=message, code=code or "PAYMENT_PROVIDER_ERROR")


class ProviderNotConfiguredError(PaymentProviderError):
    """Falta configuración del proveedor (API key o webhook secret)."""

    def __init__(self, setting: str):
        super().__init__(
            message=f"Proveedor de pagos sin configurar: {setting}",
            code="PAYMENT_PROVIDER_NOT_CONFIGURED",
        )
        self.setting = setting


class WebhookSignatureError(PaymentProviderError):
    """La firma del webhook no es válida."""

    def __init__(self, message: str = "Firma de webhook inválida"):
        super().__init__(message=message, code="INVALID_WEBHOOK_SIGNATURE")


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validación fallida en '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class InvalidDateRangeError(DomainError):
    """Rango de fechas inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_DATE_RANGE")


class InvalidMoneyError(DomainError):
    """Monto monetario inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_MONEY")
