import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import engine
from app.api.routers.bookings import router as bookings_router
from app.api.routers.health import router as health_router
from app.api.routers.payments import router as payments_router
from app.config import get_settings
from app.domain.errors import (
    BookingNotFoundError,
    BookingOverlapError,
    DomainError,
    ForbiddenActionError,
    InstrumentNotFoundError,
    InstrumentUnavailableError,
    InvalidBookingTransitionError,
    InvalidDateRangeError,
    InvalidMoneyError,
    InvalidPaymentTransitionError,
    OptimisticLockError,
    PaymentAlreadySettledError,
    PaymentNotFoundError,
    PaymentProviderError,
    ValidationError,
    WebhookSignatureError,
)
from app.infrastructure.db.tables import metadata

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Orden: la primera clase que coincide gana (WebhookSignatureError antes que PaymentProviderError)
ERROR_STATUS: list[tuple[type[DomainError], int]] = [
    (BookingNotFoundError, status.HTTP_404_NOT_FOUND),
    (InstrumentNotFoundError, status.HTTP_404_NOT_FOUND),
    (PaymentNotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenActionError, status.HTTP_403_FORBIDDEN),
    (InvalidBookingTransitionError, status.HTTP_409_CONFLICT),
    (InvalidPaymentTransitionError, status.HTTP_409_CONFLICT),
    (BookingOverlapError, status.HTTP_409_CONFLICT),
    (InstrumentUnavailableError, status.HTTP_409_CONFLICT),
    (PaymentAlreadySettledError, status.HTTP_409_CONFLICT),
    (OptimisticLockError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidDateRangeError, status.HTTP_400_BAD_REQUEST),
    (InvalidMoneyError, status.HTTP_400_BAD_REQUEST),
    (WebhookSignatureError, status.HTTP_400_BAD_REQUEST),
    (PaymentProviderError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: DomainError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Crea las tablas (dev/demo); en producción el esquema lo gestionan migraciones
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title="Instrument Rentals API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Domain error",
        extra={"code": exc.code, "path": request.url.path, "status_code": status_code},
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Evita exponer stack traces: se loguea el error completo con un error_id
    y el cliente recibe un mensaje genérico con ese id.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists.",
        },
    )


app.include_router(health_router, tags=["Health"])
app.include_router(bookings_router, prefix="/api/v1", tags=["Bookings"])
app.include_router(payments_router, prefix="/api/v1", tags=["Payments"])
