"""Invitation Transitions - pending -> accepted | rejected | expired.

Invariants:
    - Every transition leaves `pending` exactly once
    - Acceptance is paired with a membership insert by the shell in the same transaction
"""

from datetime import datetime, timedelta

from garante.core.clock import is_past
from garante.core.domain_types import InvitationStatus
from garante.core.repository_protocols import InvitationLike


def expiry_for(now: datetime, ttl_days: int) -> datetime:
    return now + timedelta(days=ttl_days)


def apply_accept(invitation: InvitationLike, now: datetime) -> None:
    invitation.status = InvitationStatus.ACCEPTED.value
    invitation.responded_at = now


def apply_reject(invitation: InvitationLike, now: datetime) -> None:
    invitation.status = InvitationStatus.REJECTED.value
    invitation.responded_at = now


def apply_expire(invitation: InvitationLike, now: datetime) -> bool:
    """Flip a stale pending invitation to expired. Returns True when it changed."""
    if invitation.status == InvitationStatus.PENDING and is_past(invitation.expires_at, now):
        invitation.status = InvitationStatus.EXPIRED.value
        return True
    return False
