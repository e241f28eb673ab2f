"""Detail Edit Lock - unresolved disputes freeze profile and business details.

Invariants:
    - PURE: the shell counts active disputes, this module decides
    - A profile is locked while any guarantee it is a party to has an active dispute
    - A business is locked while any of its guarantees has an active dispute
    - Only the profile owner / business owner may edit at all (admins bypass identity)
"""

from uuid import UUID

from garante.core.access_guard import Caller, is_admin, is_business_owner
from garante.core.errors import ErrorContext, ForbiddenError, GaranteError, UnauthorizedError


def check_profile_edit(
    caller: Caller, profile_user_id: UUID, active_disputes: int,
) -> GaranteError | None:
    ctx = ErrorContext(user_id=str(caller.user_id))
    if not (is_admin(caller) or caller.user_id == profile_user_id):
        return UnauthorizedError("Only the profile owner can edit the profile", ctx)
    if active_disputes:
        return ForbiddenError("Cannot edit profile with unresolved disputes", ctx)
    return None


def check_business_edit(
    caller: Caller, owner_id: UUID, active_disputes: int,
) -> GaranteError | None:
    ctx = ErrorContext(user_id=str(caller.user_id))
    if not is_business_owner(caller, owner_id):
        return UnauthorizedError("Only the business owner can edit the business", ctx)
    if active_disputes:
        return ForbiddenError("Cannot edit business with unresolved disputes", ctx)
    return None
