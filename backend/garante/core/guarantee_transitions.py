"""Guarantee Transitions - state mutations applied after the guard passed.

Invariants:
    - Called only after the matching enforce_guarantee check returned None
    - status == active only ever set when both consents are true
    - Consent activation is the single implicit state change in the system
    - No IO: mutates the passed entity in memory, the shell persists it
"""

from datetime import datetime

from garante.core.access_guard import Caller, party_of
from garante.core.domain_types import GuaranteeParty, GuaranteeStatus
from garante.core.enforce_guarantee import has_consent
from garante.core.repository_protocols import GuaranteeLike

ACTIVATABLE_STATUSES = frozenset({GuaranteeStatus.DRAFT, GuaranteeStatus.ACCEPTED})


def apply_accept(guarantee: GuaranteeLike, now: datetime) -> None:
    guarantee.status = GuaranteeStatus.ACCEPTED.value
    guarantee.accepted_at = now


def apply_consent(
    caller: Caller, guarantee: GuaranteeLike,
) -> bool:
    """Set the caller's consent flag. Returns True when the guarantee became active."""
    if party_of(caller, guarantee) == GuaranteeParty.SELLER:
        guarantee.seller_consent = True
    else:
        guarantee.buyer_consent = True
    if has_consent(guarantee) and GuaranteeStatus(guarantee.status) in ACTIVATABLE_STATUSES:
        guarantee.status = GuaranteeStatus.ACTIVE.value
        return True
    return False


def apply_status(
    guarantee: GuaranteeLike, target: GuaranteeStatus | str, now: datetime,
) -> None:
    target = GuaranteeStatus(target)
    guarantee.status = target.value
    if target == GuaranteeStatus.COMPLETED:
        guarantee.completed_at = now
    elif target == GuaranteeStatus.CANCELLED:
        guarantee.cancelled_at = now


def mark_disputed(guarantee: GuaranteeLike) -> None:
    guarantee.status = GuaranteeStatus.DISPUTED.value


def mark_completed(guarantee: GuaranteeLike, now: datetime) -> None:
    apply_status(guarantee, GuaranteeStatus.COMPLETED, now)
