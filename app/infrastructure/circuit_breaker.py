"""
Circuit Breaker para las llamadas al proveedor de pagos.

Estados:
- CLOSED: operación normal, las llamadas pasan
- OPEN: demasiadas fallas seguidas, las llamadas fallan de inmediato
- HALF_OPEN: pasado reset_timeout se deja pasar una llamada de prueba

Solo las fallas de red/servidor cuentan; los errores de validación de
Stripe (sesión inexistente, parámetros inválidos) se excluyen.
"""

import logging

import stripe
from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)


class StateChangeLogger(CircuitBreakerListener):
    """Loguea cada cambio de estado; un circuito abierto es un error operativo."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        log = logger.error if new_state.name == "open" else logger.warning
        log(
            "Circuit breaker state changed",
            extra={
                "breaker_name": self.name,
                "old_state": old_state.name if old_state else None,
                "new_state": new_state.name,
            },
        )


stripe_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name="stripe_circuit_breaker",
    exclude=[stripe.InvalidRequestError, stripe.AuthenticationError],
    listeners=[StateChangeLogger("stripe")],
)


__all__ = [
    "stripe_breaker",
    "CircuitBreakerError",
]
