"""Dispute Transitions - open, defend and resolve; resolution drives trust and restitution.

Invariants:
    - Called only after the matching enforce_dispute check returned None
    - Dispute status moves pending -> in_review -> resolved, never back
    - Resolve computes everything the verdict, restitution and trust ledger need in one
      outcome, so the shell can persist them together or not at all
    - Winner is derived from the decision: no_refund -> seller, refund/partial -> buyer
    - Seller win completes the guarantee immediately; buyer win completes it only when
      the restitution completes
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from garante.core.access_guard import Caller
from garante.core.aggregates import GuaranteeAggregate
from garante.core.domain_types import (
    REFUND_DECISIONS, DisputeStatus, VerdictDecision,
)
from garante.core.guarantee_transitions import mark_completed, mark_disputed
from garante.core.repository_protocols import DisputeLike, GuaranteeLike
from garante.core.trust_score import apply_penalty


@dataclass(frozen=True)
class ResolutionOutcome:
    """Everything a resolved dispute produces."""
    decision: VerdictDecision
    winner_id: UUID
    refund_amount: Decimal | None
    restitution_amount: Decimal | None
    evidence_reviewed: dict[str, Any]
    trust_before: int
    trust_after: int
    guarantee_completed: bool

    @property
    def requires_restitution(self) -> bool:
        return self.restitution_amount is not None

    @property
    def trust_delta(self) -> int:
        return self.trust_after - self.trust_before


def apply_open(guarantee: GuaranteeLike) -> None:
    mark_disputed(guarantee)


def apply_defense(
    dispute: DisputeLike, defense: dict[str, Any], defense_description: str,
) -> None:
    dispute.defense = defense
    dispute.defense_description = defense_description
    dispute.status = DisputeStatus.IN_REVIEW.value


def winner_for(decision: VerdictDecision, guarantee: GuaranteeLike) -> UUID:
    if decision in REFUND_DECISIONS:
        return guarantee.buyer_id
    return guarantee.seller_id


def restitution_amount_for(
    decision: VerdictDecision, refund_amount: Decimal | None, price: Decimal,
) -> Decimal | None:
    if decision == VerdictDecision.REFUND:
        return price
    if decision == VerdictDecision.PARTIAL_REFUND:
        return refund_amount
    return None


def apply_resolve(
    caller: Caller,
    aggregate: GuaranteeAggregate,
    dispute: DisputeLike,
    decision: VerdictDecision | str,
    refund_amount: Decimal | None,
    notes: str,
    now: datetime,
) -> ResolutionOutcome:
    """Resolve the dispute, penalize the seller, and settle a seller win."""
    decision = VerdictDecision(decision)
    guarantee = aggregate.guarantee
    seller = aggregate.seller

    dispute.status = DisputeStatus.RESOLVED.value
    dispute.resolution_notes = notes
    dispute.resolved_by = caller.user_id
    dispute.resolved_at = now

    trust_before = seller.trust_score
    seller.trust_score = apply_penalty(trust_before, decision)

    winner_id = winner_for(decision, guarantee)
    completed = False
    if winner_id == guarantee.seller_id:
        mark_completed(guarantee, now)
        completed = True

    return ResolutionOutcome(
        decision=decision,
        winner_id=winner_id,
        refund_amount=(
            refund_amount if decision == VerdictDecision.PARTIAL_REFUND else None
        ),
        restitution_amount=restitution_amount_for(
            decision, refund_amount, guarantee.price,
        ),
        evidence_reviewed={
            "evidence": dispute.evidence,
            "defense": dispute.defense,
        },
        trust_before=trust_before,
        trust_after=seller.trust_score,
        guarantee_completed=completed,
    )
