"""Guarantee ORM - persists the bilateral service agreement.

Invariants:
    - status in GuaranteeStatus values; active implies seller_consent and buyer_consent
    - price is Numeric(12, 2), non-negative
    - version increments on every UPDATE: concurrent stale writes are rejected

Design Decisions:
    - terms as JSON: opaque key/value bag, never interpreted by the core
    - No relationship() to disputes: aggregates are loaded explicitly by the service layer
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Integer, JSON, Numeric,
    String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from garante.core.domain_types import GuaranteeStatus
from garante.db.base import Base


class Guarantee(Base):
    """Guarantee aggregate root - owns its disputes, verdicts and restitutions."""
    __tablename__ = "guarantees"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_guarantees_price_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    buyer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    business_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True,
    )
    service_description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    terms: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=GuaranteeStatus.DRAFT.value,
    )
    seller_consent: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    buyer_consent: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
