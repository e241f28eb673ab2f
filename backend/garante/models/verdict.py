"""Verdict ORM - an arbitrator's binding decision on a resolved dispute.

Invariants:
    - One verdict per dispute (unique dispute_id)
    - refund_amount set only for partial_refund
    - evidence_reviewed is an immutable snapshot of evidence + defense at decision time
    - winner_id is derived from the decision (buyer for refunds, seller otherwise)
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from garante.db.base import Base


class Verdict(Base):
    """Verdict entity."""
    __tablename__ = "verdicts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    dispute_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("disputes.id"), nullable=False, unique=True,
    )
    guarantee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("guarantees.id"), nullable=False, index=True,
    )
    arbitrator_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    winner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    decision: Mapped[str] = mapped_column(String(20), nullable=False)
    refund_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True,
    )
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    evidence_reviewed: Mapped[dict] = mapped_column(JSON, nullable=False)
    decided_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
