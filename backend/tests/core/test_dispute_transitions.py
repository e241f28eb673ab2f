"""Dispute Transitions - tests for open, defense and the resolution outcome.

Tests cover:
    - open flips the guarantee to disputed
    - defense stores rebuttal and moves to in_review
    - resolve per decision: trust penalty, winner, restitution amount, completion
    - evidence snapshot and resolver bookkeeping
"""

from decimal import Decimal

from garante.core.dispute_transitions import (
    apply_defense, apply_open, apply_resolve, restitution_amount_for, winner_for,
)
from garante.core.domain_types import VerdictDecision

from tests.core.stand_ins import (
    ARBITRATOR_ID, ARBITRATOR, BUYER_ID, NOW, SELLER_ID,
    DisputeStub, GuaranteeStub, aggregate,
)


def _case(trust_score=100):
    g = GuaranteeStub(status="disputed", price=Decimal("100000"))
    dispute = DisputeStub(
        guarantee_id=g.id, status="in_review",
        defense={"receipt": "r.pdf"}, defense_description="Delivered on time",
    )
    return dispute, aggregate(g, disputes=[dispute], trust_score=trust_score)


def test_apply_open():
    g = GuaranteeStub(status="accepted")
    apply_open(g)
    assert g.status == "disputed"


def test_apply_defense():
    dispute = DisputeStub(guarantee_id=GuaranteeStub().id)
    apply_defense(dispute, {"receipt": "r.pdf"}, "Delivered on time")
    assert dispute.status == "in_review"
    assert dispute.defense == {"receipt": "r.pdf"}
    assert dispute.defense_description == "Delivered on time"


def test_winner_for_decisions():
    g = GuaranteeStub()
    assert winner_for(VerdictDecision.REFUND, g) == BUYER_ID
    assert winner_for(VerdictDecision.PARTIAL_REFUND, g) == BUYER_ID
    assert winner_for(VerdictDecision.NO_REFUND, g) == SELLER_ID


def test_restitution_amount_for():
    price = Decimal("100000")
    assert restitution_amount_for(VerdictDecision.REFUND, None, price) == price
    assert restitution_amount_for(
        VerdictDecision.PARTIAL_REFUND, Decimal("30000"), price,
    ) == Decimal("30000")
    assert restitution_amount_for(VerdictDecision.NO_REFUND, None, price) is None


def test_resolve_refund():
    dispute, agg = _case()
    outcome = apply_resolve(ARBITRATOR, agg, dispute, "refund", None, "Not delivered", NOW)
    assert dispute.status == "resolved"
    assert dispute.resolved_by == ARBITRATOR_ID
    assert dispute.resolved_at == NOW
    assert dispute.resolution_notes == "Not delivered"
    assert agg.seller.trust_score == 50
    assert outcome.trust_delta == -50
    assert outcome.winner_id == BUYER_ID
    assert outcome.restitution_amount == Decimal("100000")
    assert outcome.refund_amount is None
    assert outcome.requires_restitution
    assert not outcome.guarantee_completed
    assert agg.guarantee.status == "disputed"


def test_resolve_partial_refund():
    dispute, agg = _case()
    outcome = apply_resolve(
        ARBITRATOR, agg, dispute, "partial_refund", Decimal("30000"), "Partly late", NOW,
    )
    assert agg.seller.trust_score == 80
    assert outcome.refund_amount == Decimal("30000")
    assert outcome.restitution_amount == Decimal("30000")


def test_resolve_no_refund_completes_guarantee():
    dispute, agg = _case()
    outcome = apply_resolve(ARBITRATOR, agg, dispute, "no_refund", None, "Claim unfounded", NOW)
    assert agg.seller.trust_score == 100
    assert outcome.trust_delta == 0
    assert outcome.winner_id == SELLER_ID
    assert not outcome.requires_restitution
    assert outcome.guarantee_completed
    assert agg.guarantee.status == "completed"
    assert agg.guarantee.completed_at == NOW


def test_resolve_penalty_clamped():
    dispute, agg = _case(trust_score=10)
    outcome = apply_resolve(ARBITRATOR, agg, dispute, "refund", None, "n", NOW)
    assert agg.seller.trust_score == 0
    assert outcome.trust_before == 10


def test_resolve_snapshots_evidence_and_defense():
    dispute, agg = _case()
    outcome = apply_resolve(ARBITRATOR, agg, dispute, "refund", None, "n", NOW)
    assert outcome.evidence_reviewed == {
        "evidence": dispute.evidence,
        "defense": {"receipt": "r.pdf"},
    }
