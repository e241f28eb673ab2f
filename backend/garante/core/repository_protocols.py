"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell: dependency arrows point inward only
    - Core transition functions receive entities typed by these Protocols
    - Membership / identity lookups happen in the shell; core only sees their answers

Design Decisions:
    - Protocol over ABC: ORM rows and test stand-ins satisfy them structurally
    - MembershipProvider is async because implementations do IO; core never awaits it
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

from garante.core.domain_types import MemberRole


class UserLike(Protocol):
    """Structural contract for a user row (seller whose trust score moves)."""
    id: UUID
    role: str
    trust_score: int
    is_verified: bool


class GuaranteeLike(Protocol):
    """Structural contract for a guarantee row."""
    id: UUID
    seller_id: UUID
    buyer_id: UUID
    business_id: UUID
    price: Decimal
    status: str
    seller_consent: bool
    buyer_consent: bool
    expires_at: datetime | None
    accepted_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None


class DisputeLike(Protocol):
    """Structural contract for a dispute row."""
    id: UUID
    guarantee_id: UUID
    initiated_by: UUID
    reason: str
    description: str
    evidence: dict[str, Any]
    defense: dict[str, Any] | None
    defense_description: str | None
    status: str
    resolution_notes: str | None
    resolved_by: UUID | None
    resolved_at: datetime | None
    created_at: datetime


class VerdictLike(Protocol):
    """Structural contract for a verdict row."""
    id: UUID
    dispute_id: UUID
    guarantee_id: UUID
    arbitrator_id: UUID
    winner_id: UUID
    decision: str
    refund_amount: Decimal | None


class RestitutionLike(Protocol):
    """Structural contract for a restitution row."""
    id: UUID
    verdict_id: UUID
    amount: Decimal
    status: str
    proof_of_payment: str | None
    processed_at: datetime | None
    completed_at: datetime | None
    completed_by: UUID | None


class InvitationLike(Protocol):
    """Structural contract for a business invitation row."""
    id: UUID
    business_id: UUID
    user_id: UUID
    role: str
    status: str
    expires_at: datetime
    responded_at: datetime | None


class MembershipProvider(Protocol):
    """Membership / role / identity answers - implemented by shell."""
    async def member_role(
        self, business_id: UUID, user_id: UUID,
    ) -> MemberRole | None: ...
    async def has_any_membership(self, user_id: UUID) -> bool: ...
    async def member_count(self, business_id: UUID) -> int: ...
    async def is_verified(self, user_id: UUID) -> bool: ...
