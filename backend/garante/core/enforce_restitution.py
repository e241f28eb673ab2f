"""Restitution Guard Enforcement - process and complete prerequisites.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Only the seller processes (attests payment); buyer or arbitrator completes
    - pending -> processed -> completed, each step exactly once
"""

from garante.core.access_guard import (
    Caller, is_arbitrator, is_guarantee_party,
)
from garante.core.domain_types import GuaranteeParty, RestitutionStatus
from garante.core.errors import (
    ErrorContext, ForbiddenError, GaranteError, InputValidationError,
    InvalidTransitionError,
)
from garante.core.repository_protocols import GuaranteeLike, RestitutionLike

PROOF_MAX_LENGTH = 2000


def _ctx(
    caller: Caller, guarantee: GuaranteeLike, restitution: RestitutionLike,
) -> ErrorContext:
    return ErrorContext(
        user_id=str(caller.user_id),
        guarantee_id=str(guarantee.id),
        restitution_id=str(restitution.id),
    )


def check_process(
    caller: Caller,
    restitution: RestitutionLike,
    guarantee: GuaranteeLike,
    proof_of_payment: str,
) -> GaranteError | None:
    if not is_guarantee_party(caller, guarantee, GuaranteeParty.SELLER):
        return ForbiddenError(
            "Only the seller can process restitution",
            _ctx(caller, guarantee, restitution),
        )
    if restitution.status != RestitutionStatus.PENDING:
        return InvalidTransitionError(
            "Restitution", restitution.status, RestitutionStatus.PROCESSED.value,
            _ctx(caller, guarantee, restitution),
        )
    if not proof_of_payment or not proof_of_payment.strip():
        return InputValidationError(
            "proof_of_payment is required", "proof_of_payment",
        )
    if len(proof_of_payment) > PROOF_MAX_LENGTH:
        return InputValidationError(
            f"proof_of_payment must be at most {PROOF_MAX_LENGTH} characters",
            "proof_of_payment",
        )
    return None


def check_complete(
    caller: Caller,
    restitution: RestitutionLike,
    guarantee: GuaranteeLike,
) -> GaranteError | None:
    if not (
        is_guarantee_party(caller, guarantee, GuaranteeParty.BUYER)
        or is_arbitrator(caller)
    ):
        return ForbiddenError(
            "Only the buyer or an arbitrator can complete restitution",
            _ctx(caller, guarantee, restitution),
        )
    if restitution.status != RestitutionStatus.PROCESSED:
        return InvalidTransitionError(
            "Restitution", restitution.status, RestitutionStatus.COMPLETED.value,
            _ctx(caller, guarantee, restitution),
        )
    return None


def can_view_restitution(caller: Caller, guarantee: GuaranteeLike) -> bool:
    return is_arbitrator(caller) or is_guarantee_party(caller, guarantee)
