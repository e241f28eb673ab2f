"""Restitution Transitions - payment attestation and receipt confirmation.

Invariants:
    - Called only after the matching enforce_restitution check returned None
    - Completion is the only point where the seller's trust score is restored
    - Restoration amount is keyed to the verdict decision that imposed the penalty
    - When the buyer won the verdict, completing restitution completes the guarantee
"""

from dataclasses import dataclass
from datetime import datetime

from garante.core.access_guard import Caller
from garante.core.aggregates import GuaranteeAggregate
from garante.core.domain_types import GuaranteeStatus, RestitutionStatus
from garante.core.guarantee_transitions import mark_completed
from garante.core.repository_protocols import RestitutionLike
from garante.core.trust_score import apply_restoration


@dataclass(frozen=True)
class CompletionOutcome:
    trust_before: int
    trust_after: int
    guarantee_completed: bool


def apply_process(
    restitution: RestitutionLike, proof_of_payment: str, now: datetime,
) -> None:
    restitution.status = RestitutionStatus.PROCESSED.value
    restitution.proof_of_payment = proof_of_payment
    restitution.processed_at = now


def apply_complete(
    caller: Caller, aggregate: GuaranteeAggregate, now: datetime,
) -> CompletionOutcome:
    restitution = aggregate.restitution
    verdict = aggregate.verdict
    guarantee = aggregate.guarantee
    seller = aggregate.seller

    restitution.status = RestitutionStatus.COMPLETED.value
    restitution.completed_by = caller.user_id
    restitution.completed_at = now

    trust_before = seller.trust_score
    seller.trust_score = apply_restoration(trust_before, verdict.decision)

    completed = False
    if (
        verdict.winner_id == guarantee.buyer_id
        and guarantee.status != GuaranteeStatus.COMPLETED
        and not aggregate.has_active_dispute
    ):
        mark_completed(guarantee, now)
        completed = True

    return CompletionOutcome(
        trust_before=trust_before,
        trust_after=seller.trust_score,
        guarantee_completed=completed,
    )
