"""Domain Types - identity wrappers, lifecycle enums and trust-score constants.

Invariants:
    - UserId, BusinessId, GuaranteeId, DisputeId, VerdictId, RestitutionId wrap UUIDs
    - TrustScore is bounded 0..100
    - All valid states encoded as str Enums, stored as their .value in the DB
    - Reserved states (GuaranteeStatus.PENDING / IN_PROGRESS) are never the target of a transition

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to the raw column value
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
BusinessId = NewType("BusinessId", UUID)
GuaranteeId = NewType("GuaranteeId", UUID)
DisputeId = NewType("DisputeId", UUID)
VerdictId = NewType("VerdictId", UUID)
RestitutionId = NewType("RestitutionId", UUID)
InvitationId = NewType("InvitationId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

TrustScore = NewType("TrustScore", int)  # 0..100

TRUST_SCORE_MIN = 0
TRUST_SCORE_MAX = 100
TRUST_SCORE_INITIAL = 100


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Platform-wide role stored on the user row."""
    USER = "user"
    ARBITRATOR = "arbitrator"
    ADMIN = "admin"


class Capability(str, Enum):
    """Capabilities a caller may hold for a given action."""
    ADMIN = "admin"
    ARBITRATOR = "arbitrator"
    OWNER = "owner"
    MEMBER = "member"
    PARTY = "party"


class MemberRole(str, Enum):
    """Role of a user inside a business."""
    OWNER = "owner"
    MANAGER = "manager"
    STAFF = "staff"


class GuaranteeStatus(str, Enum):
    """Guarantee lifecycle states - maps to guarantees.status."""
    DRAFT = "draft"
    ACCEPTED = "accepted"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"
    # Reserved in the schema, unreachable through any transition.
    PENDING = "pending"
    IN_PROGRESS = "in_progress"


class DisputeStatus(str, Enum):
    """Dispute workflow states - strictly forward."""
    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"


class VerdictDecision(str, Enum):
    """Arbitration outcome."""
    REFUND = "refund"
    PARTIAL_REFUND = "partial_refund"
    NO_REFUND = "no_refund"


class RestitutionStatus(str, Enum):
    """Restitution payment states - strictly forward."""
    PENDING = "pending"
    PROCESSED = "processed"
    COMPLETED = "completed"


class InvitationStatus(str, Enum):
    """Business invitation states."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class GuaranteeParty(str, Enum):
    """Which side of a guarantee a user sits on."""
    SELLER = "seller"
    BUYER = "buyer"


# ─── Derived sets ────────────────────────────────────────────────

ACTIVE_DISPUTE_STATUSES = frozenset({
    DisputeStatus.PENDING, DisputeStatus.IN_REVIEW,
})

UPDATABLE_GUARANTEE_TARGETS = frozenset({
    GuaranteeStatus.COMPLETED,
    GuaranteeStatus.CANCELLED,
    GuaranteeStatus.DISPUTED,
})

DISPUTABLE_GUARANTEE_STATUSES = frozenset({
    GuaranteeStatus.ACCEPTED,
    GuaranteeStatus.ACTIVE,
    GuaranteeStatus.COMPLETED,
    GuaranteeStatus.DISPUTED,
})

REFUND_DECISIONS = frozenset({
    VerdictDecision.REFUND, VerdictDecision.PARTIAL_REFUND,
})

# Penalty applied to the seller at verdict time, restored on restitution completion.
TRUST_PENALTY: dict[VerdictDecision, int] = {
    VerdictDecision.REFUND: 50,
    VerdictDecision.PARTIAL_REFUND: 20,
    VerdictDecision.NO_REFUND: 0,
}
