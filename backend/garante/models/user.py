"""User ORM - platform account carrying role, identity verification and trust score.

Invariants:
    - role in {user, arbitrator, admin} (Role enum values)
    - trust_score bounded 0..100, default 100, moved only by arbitration outcomes
    - is_verified is supplied by the external identity-verification provider

Design Decisions:
    - Credentials and profile details live outside this service; only what the
      core reads is persisted here
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from garante.core.domain_types import TRUST_SCORE_INITIAL, Role
from garante.db.base import Base


class User(Base):
    """User entity - seller, buyer, arbitrator or admin."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "trust_score >= 0 AND trust_score <= 100", name="ck_users_trust_score_range",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.USER.value,
    )
    trust_score: Mapped[int] = mapped_column(
        Integer, nullable=False, default=TRUST_SCORE_INITIAL,
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
