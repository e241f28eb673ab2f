"""Restitution - tests for process/complete guards and completion effects.

Tests cover:
    - check_process: seller only, pending only, proof required
    - check_complete: buyer or arbitrator, processed only
    - apply_complete: trust restoration per decision, guarantee completion on buyer win
"""

from decimal import Decimal
from uuid import uuid4

from garante.core.enforce_restitution import (
    PROOF_MAX_LENGTH, can_view_restitution, check_complete, check_process,
)
from garante.core.errors import (
    ForbiddenError, InputValidationError, InvalidTransitionError,
)
from garante.core.restitution_transitions import apply_complete, apply_process

from tests.core.stand_ins import (
    ARBITRATOR, BUYER, BUYER_ID, NOW, SELLER, SELLER_ID, STRANGER,
    DisputeStub, GuaranteeStub, RestitutionStub, VerdictStub, aggregate,
)


def _restitution(status="pending"):
    return RestitutionStub(verdict_id=uuid4(), amount=Decimal("100000"), status=status)


def _settled(decision="partial_refund", trust_score=80, guarantee_status="disputed"):
    g = GuaranteeStub(status=guarantee_status)
    dispute = DisputeStub(guarantee_id=g.id, status="resolved")
    winner = SELLER_ID if decision == "no_refund" else BUYER_ID
    verdict = VerdictStub(
        dispute_id=dispute.id, guarantee_id=g.id, decision=decision, winner_id=winner,
    )
    restitution = RestitutionStub(
        verdict_id=verdict.id, amount=Decimal("30000"), status="processed",
    )
    return aggregate(
        g, disputes=[dispute], trust_score=trust_score,
        verdict=verdict, restitution=restitution,
    )


# ─── check_process ───────────────────────────────────────────────

def test_seller_processes():
    g = GuaranteeStub(status="disputed")
    assert check_process(SELLER, _restitution(), g, "PIX E2E 123") is None


def test_non_seller_cannot_process():
    g = GuaranteeStub(status="disputed")
    for caller in (BUYER, ARBITRATOR, STRANGER):
        assert isinstance(check_process(caller, _restitution(), g, "proof"), ForbiddenError)


def test_process_twice():
    g = GuaranteeStub(status="disputed")
    error = check_process(SELLER, _restitution("processed"), g, "proof")
    assert isinstance(error, InvalidTransitionError)
    assert error.current == "processed"


def test_process_requires_proof():
    g = GuaranteeStub(status="disputed")
    assert check_process(SELLER, _restitution(), g, "   ").field == "proof_of_payment"
    error = check_process(SELLER, _restitution(), g, "x" * (PROOF_MAX_LENGTH + 1))
    assert isinstance(error, InputValidationError)


def test_apply_process():
    r = _restitution()
    apply_process(r, "PIX E2E 123", NOW)
    assert r.status == "processed"
    assert r.proof_of_payment == "PIX E2E 123"
    assert r.processed_at == NOW


# ─── check_complete ──────────────────────────────────────────────

def test_buyer_or_arbitrator_completes():
    g = GuaranteeStub(status="disputed")
    assert check_complete(BUYER, _restitution("processed"), g) is None
    assert check_complete(ARBITRATOR, _restitution("processed"), g) is None


def test_seller_cannot_complete():
    g = GuaranteeStub(status="disputed")
    assert isinstance(check_complete(SELLER, _restitution("processed"), g), ForbiddenError)
    assert isinstance(check_complete(STRANGER, _restitution("processed"), g), ForbiddenError)


def test_complete_requires_processed():
    g = GuaranteeStub(status="disputed")
    assert isinstance(check_complete(BUYER, _restitution(), g), InvalidTransitionError)
    assert isinstance(
        check_complete(BUYER, _restitution("completed"), g), InvalidTransitionError,
    )


def test_can_view_restitution():
    g = GuaranteeStub()
    assert can_view_restitution(SELLER, g)
    assert can_view_restitution(ARBITRATOR, g)
    assert not can_view_restitution(STRANGER, g)


# ─── apply_complete ──────────────────────────────────────────────

def test_partial_refund_restores_twenty():
    agg = _settled("partial_refund", trust_score=80)
    outcome = apply_complete(BUYER, agg, NOW)
    assert agg.seller.trust_score == 100
    assert (outcome.trust_before, outcome.trust_after) == (80, 100)
    assert agg.restitution.status == "completed"
    assert agg.restitution.completed_by == BUYER_ID
    assert agg.restitution.completed_at == NOW


def test_full_refund_restores_fifty():
    agg = _settled("refund", trust_score=50)
    apply_complete(ARBITRATOR, agg, NOW)
    assert agg.seller.trust_score == 100


def test_restoration_capped():
    agg = _settled("refund", trust_score=70)
    apply_complete(BUYER, agg, NOW)
    assert agg.seller.trust_score == 100


def test_buyer_win_completes_guarantee():
    agg = _settled("refund", trust_score=50)
    outcome = apply_complete(BUYER, agg, NOW)
    assert outcome.guarantee_completed
    assert agg.guarantee.status == "completed"
    assert agg.guarantee.completed_at == NOW


def test_already_completed_guarantee_untouched():
    agg = _settled("refund", trust_score=50, guarantee_status="completed")
    outcome = apply_complete(BUYER, agg, NOW)
    assert not outcome.guarantee_completed


def test_newer_active_dispute_keeps_guarantee_open():
    agg = _settled("refund", trust_score=50)
    agg.disputes.append(DisputeStub(guarantee_id=agg.guarantee.id))
    outcome = apply_complete(BUYER, agg, NOW)
    assert not outcome.guarantee_completed
    assert agg.guarantee.status == "disputed"
