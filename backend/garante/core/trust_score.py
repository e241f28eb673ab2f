"""Trust Score Ledger - bounded seller reputation moved only by arbitration.

Invariants:
    - Score always within [TRUST_SCORE_MIN, TRUST_SCORE_MAX]
    - Penalty at verdict time and restoration at restitution completion use the same amount
    - no_refund moves nothing
    - These are the only functions that compute a new score
"""

from garante.core.domain_types import (
    TRUST_PENALTY, TRUST_SCORE_MAX, TRUST_SCORE_MIN,
    TrustScore, VerdictDecision,
)


def penalty_for(decision: VerdictDecision | str) -> int:
    return TRUST_PENALTY[VerdictDecision(decision)]


def clamp(score: int) -> TrustScore:
    return TrustScore(max(TRUST_SCORE_MIN, min(TRUST_SCORE_MAX, score)))


def apply_penalty(score: int, decision: VerdictDecision | str) -> TrustScore:
    """Score after a verdict with the given decision, clamped at the floor."""
    return clamp(score - penalty_for(decision))


def apply_restoration(score: int, decision: VerdictDecision | str) -> TrustScore:
    """Score after the restitution for that verdict completes, clamped at the ceiling."""
    return clamp(score + penalty_for(decision))
