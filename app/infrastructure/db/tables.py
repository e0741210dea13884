from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)

metadata = MetaData()

instruments = Table(
    "instruments",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("brand", String(120), nullable=False, default=""),
    Column("model", String(120), nullable=False, default=""),
    Column("category", String(80), nullable=False, default=""),
    Column("location", String(120), nullable=False, default=""),
    Column("price_per_day", Numeric(12, 2), nullable=False),
    Column("is_available", Boolean, nullable=False, default=True),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("instrument_id", String(36), ForeignKey("instruments.id"), nullable=False),
    Column("renter_id", String(64), nullable=False, index=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("pickup_date", DateTime(timezone=True), nullable=False),
    Column("return_date", DateTime(timezone=True), nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("commission", Numeric(12, 2), nullable=False),
    Column("owner_payout", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("status", String(16), nullable=False),
    Column("payment_status", String(16), nullable=False),
    Column("provider_session_id", String(255)),
    Column("provider_intent_id", String(255)),
    Column("last_webhook_event_id", String(255)),
    Column("last_webhook_at", DateTime(timezone=True)),
    Column("paid_at", DateTime(timezone=True)),
    Column("pickup_confirmed_at", DateTime(timezone=True)),
    Column("return_confirmed_at", DateTime(timezone=True)),
    Column("cancelled_at", DateTime(timezone=True)),
    Column("late_days", Integer, nullable=False, default=0),
    Column("late_fee", Numeric(12, 2), nullable=False, default=0),
    Column("late_fee_paid", Boolean, nullable=False, default=False),
    Column("late_fee_paid_at", DateTime(timezone=True)),
    Column("version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Index("ix_bookings_instrument_dates", "instrument_id", "pickup_date", "return_date"),
)

payments = Table(
    "payments",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("booking_id", String(36), ForeignKey("bookings.id"), nullable=False),
    Column("user_id", String(64), nullable=False, index=True),
    Column("type", String(16), nullable=False),
    Column("amount", Integer, nullable=False),
    Column("display_amount", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("commission", Numeric(12, 2), nullable=False),
    Column("owner_payout", Numeric(12, 2), nullable=False),
    Column("provider_session_id", String(255)),
    Column("provider_intent_id", String(255)),
    Column("status", String(16), nullable=False),
    Column("paid_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    UniqueConstraint("booking_id", "user_id", "type", name="uq_payments_booking_user_type"),
)
