"""Servicios de dominio: reglas puras sin dependencias de infraestructura."""
