"""Expiry Rules - which stale guarantees the periodic sweep may close.

Invariants:
    - Only draft guarantees past expires_at are swept, to cancelled
    - accepted guarantees stay put: their buyer may still raise a dispute after expiry
    - active, disputed and completed guarantees are never touched by the sweep
    - Idempotent: a swept guarantee is no longer eligible
"""

from datetime import datetime

from garante.core.clock import is_past
from garante.core.domain_types import GuaranteeStatus
from garante.core.guarantee_transitions import apply_status
from garante.core.repository_protocols import GuaranteeLike

SWEEPABLE_GUARANTEE_STATUSES = frozenset({GuaranteeStatus.DRAFT})


def is_sweepable(guarantee: GuaranteeLike, now: datetime) -> bool:
    return (
        GuaranteeStatus(guarantee.status) in SWEEPABLE_GUARANTEE_STATUSES
        and is_past(guarantee.expires_at, now)
    )


def apply_expire(guarantee: GuaranteeLike, now: datetime) -> bool:
    """Cancel an expired, never-agreed guarantee. Returns True when it changed."""
    if not is_sweepable(guarantee, now):
        return False
    apply_status(guarantee, GuaranteeStatus.CANCELLED, now)
    return True
