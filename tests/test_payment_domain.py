from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.domain.entities.payment import Payment, PaymentKey, PaymentStatus, PaymentType
from app.domain.errors import InvalidPaymentTransitionError, ValidationError
from app.domain.services.pricing import split_commission
from app.domain.value_objects.money import Money

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _draft(session_id: str = "cs_1", payment_id: str = "p-1") -> Payment:
    total = Money(Decimal("3000"), "lkr")
    commission, payout = split_commission(total)
    return Payment.open(
        payment_id=payment_id,
        key=PaymentKey("b-1", "renter-1", PaymentType.RENTAL),
        total=total,
        commission=commission,
        owner_payout=payout,
        provider_session_id=session_id,
        created_at=NOW,
    )


def test_open_payment_is_pending_in_minor_units():
    payment = _draft()
    assert payment.status == PaymentStatus.PENDING
    assert payment.amount == 300000
    assert payment.display_amount == Decimal("3000")
    assert payment.commission == Decimal("300")
    assert payment.key == PaymentKey("b-1", "renter-1", "rental")


def test_mark_succeeded_is_idempotent():
    paid = _draft().mark_succeeded("pi_1", paid_at=NOW)
    assert paid.is_successful
    assert paid.provider_intent_id == "pi_1"

    again = paid.mark_succeeded("pi_2", paid_at=NOW + timedelta(hours=1))
    assert again is paid


def test_failed_payment_can_still_succeed():
    failed = _draft().mark_failed(at=NOW)
    assert failed.status == PaymentStatus.FAILED
    assert failed.mark_failed(at=NOW) is failed
    assert failed.mark_succeeded(None, paid_at=NOW).is_successful


def test_succeeded_payment_cannot_fail():
    paid = _draft().mark_succeeded("pi_1", paid_at=NOW)
    with pytest.raises(InvalidPaymentTransitionError):
        paid.mark_failed(at=NOW)


def test_reopen_keeps_original_identity():
    original = _draft()
    retry = _draft(session_id="cs_2", payment_id="p-2")
    reopened = original.reopen(retry)
    assert reopened.id == "p-1"
    assert reopened.provider_session_id == "cs_2"
    assert reopened.created_at == original.created_at


def test_split_must_add_up():
    with pytest.raises(ValidationError):
        Payment(
            id="p-1",
            booking_id="b-1",
            user_id="renter-1",
            type=PaymentType.RENTAL,
            amount=100,
            display_amount=Decimal("1"),
            currency="lkr",
            commission=Decimal("1"),
            owner_payout=Decimal("1"),
        )
