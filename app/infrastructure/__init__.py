"""
Capa de Infraestructura - Motor de reservas y pagos.

Implementaciones concretas de los puertos (interfaces).

Estructura:
- db/: Tablas, engine y repositorios SQL (SQLAlchemy Core)
- gateways/: Adaptador de Stripe Checkout
- in_memory/: Implementaciones en memoria para desarrollo y testing
- circuit_breaker.py: Circuit breaker del proveedor de pagos
"""
