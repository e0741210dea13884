"""
Capa de Aplicación - Motor de reservas y pagos.

Esta capa contiene los casos de uso, DTOs e interfaces (puertos).
Orquesta la lógica de negocio y define los contratos con la infraestructura.

Estructura:
- use_cases/: Casos de uso del sistema
- dtos/: Data Transfer Objects
- interfaces/: Puertos (contratos para adaptadores)
"""
