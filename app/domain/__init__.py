"""
Capa de Dominio - Motor de reservas y pagos de instrumentos.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.
Incluye entidades, value objects, servicios de dominio y excepciones.

Estructura:
- entities/: Entidades del dominio (Booking, Payment, Instrument)
- value_objects/: Objetos de valor inmutables (Money, DateRange, Actor)
- services/: Reglas puras (disponibilidad, precio, recargo por atraso)
- errors.py: Excepciones específicas del dominio
"""
