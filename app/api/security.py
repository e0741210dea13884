"""
Identidad del llamador.

La autenticación la resuelve la capa superior (gateway/BFF) y llega como
cabeceras X-User-Id y X-User-Role; aquí solo se validan y se convierten
en un Actor.
"""

from fastapi import Header, HTTPException, status

from app.domain.value_objects.actor import Actor, Role


async def get_actor(
    user_id: str | None = Header(default=None, alias="X-User-Id"),
    role: str | None = Header(default=None, alias="X-User-Role"),
) -> Actor:
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    try:
        actor_role = Role((role or Role.RENTER.value).lower())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role: {role}",
        ) from exc
    return Actor(user_id=user_id, role=actor_role)
