"""Trust Score Ledger - tests for penalty, restoration and clamping.

Tests cover:
    - penalty per decision (refund 50, partial 20, no_refund 0)
    - clamping at 0 and 100
    - restoration after a clamped penalty never exceeds 100
"""

from garante.core.domain_types import VerdictDecision
from garante.core.trust_score import (
    apply_penalty, apply_restoration, clamp, penalty_for,
)


def test_penalty_for_accepts_raw_strings():
    assert penalty_for("refund") == 50
    assert penalty_for(VerdictDecision.PARTIAL_REFUND) == 20


def test_refund_penalty():
    assert apply_penalty(100, VerdictDecision.REFUND) == 50


def test_partial_refund_penalty():
    assert apply_penalty(100, VerdictDecision.PARTIAL_REFUND) == 80


def test_no_refund_leaves_score():
    assert apply_penalty(73, VerdictDecision.NO_REFUND) == 73
    assert apply_restoration(73, VerdictDecision.NO_REFUND) == 73


def test_penalty_clamped_at_zero():
    assert apply_penalty(30, VerdictDecision.REFUND) == 0


def test_restoration_clamped_at_hundred():
    assert apply_restoration(90, VerdictDecision.PARTIAL_REFUND) == 100


def test_restoration_after_clamped_penalty():
    # 30 - 50 clamps to 0; restoring 50 lands on 50, not the original 30
    penalized = apply_penalty(30, VerdictDecision.REFUND)
    assert apply_restoration(penalized, VerdictDecision.REFUND) == 50


def test_penalty_then_restoration_round_trip():
    score = apply_penalty(100, VerdictDecision.PARTIAL_REFUND)
    assert apply_restoration(score, VerdictDecision.PARTIAL_REFUND) == 100


def test_clamp_bounds():
    assert clamp(-5) == 0
    assert clamp(150) == 100
    assert clamp(42) == 42
