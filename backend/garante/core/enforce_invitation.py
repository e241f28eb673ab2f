"""Invitation Guard Enforcement - who may invite whom, and who may respond.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Only the business owner (or admin) invites; only the invitee responds
    - Invitee must be verified and not yet a member of any business
    - Business must be verified and below its member limit
    - One pending invitation per (business, invitee) pair
"""

from datetime import datetime
from uuid import UUID

from garante.core.access_guard import Caller, is_business_owner
from garante.core.clock import is_past
from garante.core.domain_types import InvitationStatus, MemberRole
from garante.core.errors import (
    AlreadyExistsError, ExpiredError, ForbiddenError, GaranteError,
    InputValidationError, InvalidTransitionError, UnauthorizedError,
    ErrorContext,
)
from garante.core.repository_protocols import InvitationLike

INVITABLE_ROLES = frozenset({MemberRole.MANAGER, MemberRole.STAFF})


def check_invite(
    caller: Caller,
    owner_id: UUID,
    business_verified: bool,
    member_count: int,
    member_limit: int,
    invitee_verified: bool,
    invitee_has_membership: bool,
    has_pending_invitation: bool,
    role: MemberRole | str,
) -> GaranteError | None:
    ctx = ErrorContext(user_id=str(caller.user_id))
    if not is_business_owner(caller, owner_id):
        return UnauthorizedError("Only the business owner can invite members", ctx)
    try:
        role = MemberRole(role)
    except ValueError:
        role = None
    if role not in INVITABLE_ROLES:
        return InputValidationError("Role must be one of: manager, staff", "role")
    if not invitee_verified:
        return ForbiddenError(
            "Only verified profiles can be invited to a business", ctx,
        )
    if invitee_has_membership:
        return ForbiddenError(
            "Profile is already a member of another business", ctx,
        )
    if not business_verified or member_count >= member_limit:
        return ForbiddenError(
            "Business has reached maximum member limit or is not verified", ctx,
        )
    if has_pending_invitation:
        return AlreadyExistsError(
            "An invitation is already pending for this user", context=ctx,
        )
    return None


def check_respond(
    caller: Caller,
    invitation: InvitationLike,
    now: datetime,
    enforce_expiry: bool = True,
) -> GaranteError | None:
    """Shared guard for accept (enforce_expiry) and reject."""
    ctx = ErrorContext(user_id=str(caller.user_id))
    if caller.user_id != invitation.user_id:
        return UnauthorizedError("Only the invitee can respond to an invitation", ctx)
    if invitation.status != InvitationStatus.PENDING:
        return InvalidTransitionError(
            "Invitation", invitation.status, "responded", ctx,
        )
    if enforce_expiry and is_past(invitation.expires_at, now):
        return ExpiredError("Invitation", ctx)
    return None
