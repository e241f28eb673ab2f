"""Dispute Guard Enforcement - open, defense and resolve prerequisites.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return a GaranteError on violation, None on success
    - Only the buyer opens; only the non-initiating party defends, once, while pending
    - At most one pending/in_review dispute per guarantee
    - A pending dispute without defense is arbitrable only after the cooling-off window
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from garante.core.access_guard import (
    Caller, is_admin, is_arbitrator, is_dispute_party, party_of,
)
from garante.core.aggregates import GuaranteeAggregate
from garante.core.business_days import cooling_off_elapsed
from garante.core.domain_types import (
    DISPUTABLE_GUARANTEE_STATUSES, DisputeStatus, GuaranteeParty,
    GuaranteeStatus, VerdictDecision,
)
from garante.core.errors import (
    AlreadyResolvedError, DisputeAlreadyActiveError, ErrorContext,
    ForbiddenError, GaranteError, InputValidationError, InvalidTransitionError,
    NotYetResolvableError, UnauthorizedError,
)
from garante.core.repository_protocols import DisputeLike, GuaranteeLike

logger = logging.getLogger(__name__)

REASON_MAX_LENGTH = 255


def _ctx(
    caller: Caller, guarantee: GuaranteeLike, dispute: DisputeLike | None = None,
) -> ErrorContext:
    return ErrorContext(
        user_id=str(caller.user_id),
        guarantee_id=str(guarantee.id),
        dispute_id=str(dispute.id) if dispute is not None else None,
    )


def _blank(value: str | None) -> bool:
    return not value or not value.strip()


def can_be_resolved(
    dispute: DisputeLike, now: datetime, required_days: int,
) -> tuple[bool, int]:
    """(eligible, business_days) - in_review is immediate, pending waits."""
    status = DisputeStatus(dispute.status)
    if status == DisputeStatus.IN_REVIEW:
        return True, 0
    if status == DisputeStatus.PENDING:
        eligible, days = cooling_off_elapsed(dispute.created_at, now, required_days)
        logger.debug(
            f"Dispute resolution check: {days} working days, can_resolve={eligible}",
            extra={"dispute_id": str(dispute.id)},
        )
        return eligible, days
    return False, 0


# ─── Open ────────────────────────────────────────────────────────

def check_open(
    caller: Caller,
    aggregate: GuaranteeAggregate,
    reason: str,
    description: str,
    evidence: dict[str, Any],
) -> GaranteError | None:
    guarantee = aggregate.guarantee
    if party_of(caller, guarantee) != GuaranteeParty.BUYER:
        if is_admin(caller):
            return ForbiddenError(
                "Disputes are raised by the buyer of the guarantee",
                _ctx(caller, guarantee),
            )
        return UnauthorizedError(
            "Only the buyer can initiate a dispute", _ctx(caller, guarantee),
        )
    if GuaranteeStatus(guarantee.status) not in DISPUTABLE_GUARANTEE_STATUSES:
        return InvalidTransitionError(
            "Guarantee", guarantee.status, GuaranteeStatus.DISPUTED.value,
            _ctx(caller, guarantee),
        )
    if aggregate.has_active_dispute:
        return DisputeAlreadyActiveError(_ctx(caller, guarantee))
    if _blank(reason):
        return InputValidationError("Reason is required", "reason")
    if len(reason) > REASON_MAX_LENGTH:
        return InputValidationError(
            f"Reason must be at most {REASON_MAX_LENGTH} characters", "reason",
        )
    if _blank(description):
        return InputValidationError("Description is required", "description")
    if not evidence:
        return InputValidationError("Evidence is required", "evidence")
    return None


# ─── SubmitDefense ───────────────────────────────────────────────

def check_defense(
    caller: Caller,
    dispute: DisputeLike,
    guarantee: GuaranteeLike,
    defense: dict[str, Any],
    defense_description: str,
) -> GaranteError | None:
    if caller.user_id == dispute.initiated_by:
        return ForbiddenError(
            "Cannot submit defense for a dispute you initiated",
            _ctx(caller, guarantee, dispute),
        )
    if is_admin(caller) and party_of(caller, guarantee) is None:
        return ForbiddenError(
            "A defense is filed by the counter-party of the dispute",
            _ctx(caller, guarantee, dispute),
        )
    if not is_dispute_party(caller, dispute, guarantee):
        return UnauthorizedError(
            "Only the seller or buyer can submit a defense",
            _ctx(caller, guarantee, dispute),
        )
    if dispute.status != DisputeStatus.PENDING:
        return InvalidTransitionError(
            "Dispute", dispute.status, DisputeStatus.IN_REVIEW.value,
            _ctx(caller, guarantee, dispute),
        )
    if _blank(defense_description):
        return InputValidationError(
            "Defense description is required", "defense_description",
        )
    if not defense:
        return InputValidationError("Defense is required", "defense")
    return None


# ─── Resolve ─────────────────────────────────────────────────────

def check_refund_terms(
    decision: VerdictDecision | str,
    refund_amount: Decimal | None,
    price: Decimal,
    notes: str,
) -> GaranteError | None:
    try:
        decision = VerdictDecision(decision)
    except ValueError:
        return InputValidationError(
            "Decision must be one of: refund, partial_refund, no_refund",
            "decision",
        )
    if _blank(notes):
        return InputValidationError("Notes are required", "notes")
    if decision == VerdictDecision.PARTIAL_REFUND:
        if refund_amount is None:
            return InputValidationError(
                "refund_amount is required for a partial refund", "refund_amount",
            )
        if refund_amount <= 0 or refund_amount > price:
            return InputValidationError(
                f"refund_amount must be greater than 0 and at most {price}",
                "refund_amount",
            )
    return None


def check_resolve(
    caller: Caller,
    dispute: DisputeLike,
    aggregate: GuaranteeAggregate,
    decision: VerdictDecision | str,
    refund_amount: Decimal | None,
    notes: str,
    now: datetime,
    required_days: int,
) -> GaranteError | None:
    guarantee = aggregate.guarantee
    if not is_arbitrator(caller):
        return UnauthorizedError(
            "Only arbitrators can resolve disputes",
            _ctx(caller, guarantee, dispute),
        )
    if dispute.status == DisputeStatus.RESOLVED or aggregate.verdict is not None:
        return AlreadyResolvedError(_ctx(caller, guarantee, dispute))
    eligible, days = can_be_resolved(dispute, now, required_days)
    if not eligible:
        return NotYetResolvableError(days, required_days, _ctx(caller, guarantee, dispute))
    return check_refund_terms(decision, refund_amount, guarantee.price, notes)
