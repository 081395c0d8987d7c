"""SQLAlchemy models for all database tables."""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    Float,
    Integer,
    String,
    Text,
    TIMESTAMP,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from crosssell.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CrossSellOpportunity(Base):
    """A scored cross-sell opportunity for one customer."""

    __tablename__ = "cross_sell_opportunities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    agency_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    upload_batch_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    # Customer
    customer_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    customer_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String, default="")
    email: Mapped[str] = mapped_column(String, default="")
    address: Mapped[str] = mapped_column(String, default="")
    city: Mapped[str] = mapped_column(String, default="")
    zip_code: Mapped[str] = mapped_column(String, default="")

    # Policy
    current_products: Mapped[str] = mapped_column(String, default="Unknown")
    policy_count: Mapped[int] = mapped_column(Integer, default=1)
    current_premium: Mapped[float] = mapped_column(Float, default=0.0)
    tenure_years: Mapped[float] = mapped_column(Float, default=0.0)
    renewal_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Clamped to >= 0 when persisted
    days_until_renewal: Mapped[int | None] = mapped_column(Integer, nullable=True)
    renewal_status: Mapped[str] = mapped_column(String, default="Not Taken")
    balance_due: Mapped[float] = mapped_column(Float, default=0.0)
    ezpay_status: Mapped[str] = mapped_column(String, default="No")

    # Classification and scoring
    is_true_monoline: Mapped[bool] = mapped_column(Boolean, default=False)
    recommended_product: Mapped[str] = mapped_column(String, nullable=False)
    segment_type: Mapped[str] = mapped_column(String, nullable=False, index=True)
    priority_score: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    legacy_score: Mapped[int] = mapped_column(Integer, nullable=False)
    base_score: Mapped[int] = mapped_column(Integer, nullable=False)
    lead_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    priority_tier: Mapped[str] = mapped_column(String, nullable=False, index=True)
    priority_rank: Mapped[int] = mapped_column(Integer, default=0)
    confidence: Mapped[float] = mapped_column(Float, default=0.7)
    enhanced: Mapped[bool] = mapped_column(Boolean, default=False)
    customer_segment: Mapped[str] = mapped_column(String, nullable=False)

    # Enrichment
    potential_premium_add: Mapped[float] = mapped_column(Float, default=0.0)
    expected_conversion_pct: Mapped[int] = mapped_column(Integer, default=0)
    retention_lift_pct: Mapped[int] = mapped_column(Integer, default=0)
    talking_points: Mapped[list] = mapped_column(JSON, default=list)

    # Lifecycle
    dismissed: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    dismissed_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    dismissed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    task_id: Mapped[str | None] = mapped_column(String, nullable=True)
    task_linked_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class CustomerInsightRecord(Base):
    """Household-level customer record used to resolve task customers."""

    __tablename__ = "customer_insights"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    agency_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    customer_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    customer_name: Mapped[str] = mapped_column(String, nullable=False)
    total_premium: Mapped[float] = mapped_column(Float, default=0.0)
    policy_count: Mapped[int] = mapped_column(Integer, default=1)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=_utcnow)
