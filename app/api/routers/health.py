"""
Health check endpoints para orquestación y monitoreo.

- /health: liveness (siempre 200 si el proceso responde)
- /health/db: conectividad con la base de datos
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "instrument-rentals-api"


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/db")
async def health_check_db(session: AsyncSession = Depends(get_db_session)):
    """Ejecuta SELECT 1; 503 si la base no responde."""
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        return {"status": "healthy", "component": "database"}
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database health check failed", exc_info=e)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "component": "database",
                "error": "Database connection failed",
            },
        )
