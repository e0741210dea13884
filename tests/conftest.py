"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Reloj e ids deterministas (FakeClock / FakeUUIDGenerator)
- Repositorios in-memory y casos de uso armados como en la API
- Cliente HTTP de prueba (FastAPI TestClient)
- Firma de webhooks de Stripe
"""

import hashlib
import hmac
import json
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import build_in_memory_bundle, build_use_cases, get_use_cases
from app.application.interfaces.clock import FakeClock
from app.application.interfaces.uuid_generator import FakeUUIDGenerator
from app.config import Settings
from app.domain.entities.instrument import Instrument
from app.domain.value_objects.actor import Actor, Role
from app.main import app

WEBHOOK_SECRET = "whsec_test_secret"

OWNER_ID = "owner-1"
RENTER_ID = "renter-1"
ADMIN_ID = "admin-1"

# ============================================================================
# TIEMPO E IDS
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def ids() -> FakeUUIDGenerator:
    return FakeUUIDGenerator(prefix="t")


# ============================================================================
# ACTORES
# ============================================================================


@pytest.fixture
def owner() -> Actor:
    return Actor(user_id=OWNER_ID, role=Role.OWNER)


@pytest.fixture
def renter() -> Actor:
    return Actor(user_id=RENTER_ID, role=Role.RENTER)


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id=ADMIN_ID, role=Role.ADMIN)


# ============================================================================
# CASOS DE USO IN-MEMORY
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(
        use_in_memory=True,
        stripe_webhook_secret=WEBHOOK_SECRET,
        frontend_url="http://frontend.test",
        _env_file=None,
    )


@pytest.fixture
def bundle(clock, ids) -> dict:
    return build_in_memory_bundle(clock=clock, id_generator=ids)


@pytest.fixture
def instrument(bundle) -> Instrument:
    """Guitarra de 1000/día publicada por OWNER_ID."""
    return bundle["instrument_repo"].add(
        Instrument(
            id="inst-guitar",
            owner_id=OWNER_ID,
            price_per_day=Decimal("1000"),
            brand="Fender",
            model="Stratocaster",
            category="Guitar",
            location="Colombo",
        )
    )


@pytest.fixture
def use_cases(bundle, settings) -> dict:
    return build_use_cases(bundle, settings)


# ============================================================================
# CLIENTE HTTP
# ============================================================================


@pytest.fixture
def client(use_cases) -> Generator[TestClient, None, None]:
    """TestClient con los casos de uso del bundle de la prueba."""
    app.dependency_overrides[get_use_cases] = lambda: use_cases
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def actor_headers(user_id: str, role: str) -> dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Role": role}


# ============================================================================
# WEBHOOKS
# ============================================================================


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Genera un header Stripe-Signature válido (esquema v1, HMAC-SHA256)."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode()
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_event(
    event_id: str,
    booking_id: str,
    session_id: str,
    payment_type: str = "rental",
    event_type: str = "checkout.session.completed",
    payment_status: str = "paid",
) -> str:
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "data": {
                "object": {
                    "id": session_id,
                    "object": "checkout.session",
                    "payment_status": payment_status,
                    "payment_intent": f"pi_{event_id}",
                    "metadata": {"bookingId": booking_id, "paymentType": payment_type},
                }
            },
        }
    )


# ============================================================================
# HOOKS DE PYTEST
# ============================================================================


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """
    Reset del circuit breaker antes y después de cada test.
    Evita que tests fallen por un breaker abierto en un test anterior.
    """
    from app.infrastructure.circuit_breaker import stripe_breaker

    stripe_breaker.close()
    yield
    stripe_breaker.close()
