"""Guarantee Guard Enforcement - validates every guarantee transition before it applies.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return a GaranteError on violation, None on success
    - Checks run in order actor, state, time, input: first error wins
    - Expiry blocks accept, consent, completion and cancellation; never dispute-raising

Design Decisions:
    - Errors returned, not raised: tests assert on values and services decide when to raise
"""

from datetime import datetime
from decimal import Decimal

from garante.core.access_guard import (
    Caller, capabilities_for, is_guarantee_party, party_of,
)
from garante.core.aggregates import GuaranteeAggregate
from garante.core.clock import as_utc, is_past
from garante.core.domain_types import (
    Capability, GuaranteeParty, GuaranteeStatus, MemberRole,
    UPDATABLE_GUARANTEE_TARGETS,
)
from garante.core.errors import (
    AlreadyConsentedError, ConsentRequiredError, ErrorContext, ExpiredError,
    ForbiddenError, GaranteError, InputValidationError, InvalidTransitionError,
    UnauthorizedError,
)
from garante.core.repository_protocols import GuaranteeLike

CLOSED_STATUSES = frozenset({GuaranteeStatus.COMPLETED, GuaranteeStatus.CANCELLED})


def _ctx(caller: Caller, guarantee: GuaranteeLike) -> ErrorContext:
    return ErrorContext(user_id=str(caller.user_id), guarantee_id=str(guarantee.id))


def has_consent(guarantee: GuaranteeLike) -> bool:
    return bool(guarantee.seller_consent and guarantee.buyer_consent)


# ─── Create ──────────────────────────────────────────────────────

def check_create(
    caller: Caller,
    member_role: MemberRole | None,
    seller_verified: bool,
    price: Decimal,
    expires_at: datetime | None,
    service_description: str,
    now: datetime,
) -> GaranteError | None:
    """Seller must be a verified member of the business; terms must be well-formed."""
    if Capability.MEMBER not in capabilities_for(caller, member_role=member_role):
        return InputValidationError(
            "Seller must be a member of the business to create guarantees",
            "business_id",
        )
    if not seller_verified:
        return ForbiddenError(
            "Only identity-verified sellers can create guarantees",
        )
    if price < 0:
        return InputValidationError("Price must be non-negative", "price")
    if not service_description or not service_description.strip():
        return InputValidationError(
            "Service description is required", "service_description",
        )
    if expires_at is not None and as_utc(expires_at) <= as_utc(now):
        return InputValidationError(
            "Expiry must be in the future", "expires_at",
        )
    return None


# ─── Accept ──────────────────────────────────────────────────────

def check_accept(
    caller: Caller, guarantee: GuaranteeLike, now: datetime,
) -> GaranteError | None:
    if not is_guarantee_party(caller, guarantee, GuaranteeParty.BUYER):
        return UnauthorizedError(
            "Only the buyer can accept the guarantee", _ctx(caller, guarantee),
        )
    if guarantee.status != GuaranteeStatus.DRAFT:
        return InvalidTransitionError(
            "Guarantee", guarantee.status, GuaranteeStatus.ACCEPTED.value,
            _ctx(caller, guarantee),
        )
    if is_past(guarantee.expires_at, now):
        return ExpiredError("Guarantee", _ctx(caller, guarantee))
    return None


# ─── Consent ─────────────────────────────────────────────────────

def check_consent(
    caller: Caller, guarantee: GuaranteeLike, now: datetime,
) -> GaranteError | None:
    """Caller gives consent for their own side, once, before expiry."""
    if not is_guarantee_party(caller, guarantee):
        return UnauthorizedError(
            "Only the seller or buyer can give consent", _ctx(caller, guarantee),
        )
    party = party_of(caller, guarantee)
    if party is None:
        return ForbiddenError(
            "Consent can only be given by a party to the guarantee",
            _ctx(caller, guarantee),
        )
    if GuaranteeStatus(guarantee.status) in CLOSED_STATUSES:
        return InvalidTransitionError(
            "Guarantee", guarantee.status, GuaranteeStatus.ACTIVE.value,
            _ctx(caller, guarantee),
        )
    already = (
        guarantee.seller_consent if party == GuaranteeParty.SELLER
        else guarantee.buyer_consent
    )
    if already:
        return AlreadyConsentedError(party.value, _ctx(caller, guarantee))
    if is_past(guarantee.expires_at, now):
        return ExpiredError("Guarantee", _ctx(caller, guarantee))
    return None


# ─── UpdateStatus ────────────────────────────────────────────────

def _check_completion(
    caller: Caller, aggregate: GuaranteeAggregate, now: datetime,
) -> GaranteError | None:
    guarantee = aggregate.guarantee
    if not is_guarantee_party(caller, guarantee, GuaranteeParty.BUYER):
        return UnauthorizedError(
            "Only the buyer can mark a guarantee as completed",
            _ctx(caller, guarantee),
        )
    if GuaranteeStatus(guarantee.status) in CLOSED_STATUSES or aggregate.has_active_dispute:
        return InvalidTransitionError(
            "Guarantee", guarantee.status, GuaranteeStatus.COMPLETED.value,
            _ctx(caller, guarantee),
        )
    if is_past(guarantee.expires_at, now):
        return ExpiredError("Guarantee", _ctx(caller, guarantee))
    if not has_consent(guarantee):
        return ConsentRequiredError(_ctx(caller, guarantee))
    return None


def _check_cancellation(
    caller: Caller, aggregate: GuaranteeAggregate, now: datetime,
) -> GaranteError | None:
    guarantee = aggregate.guarantee
    if GuaranteeStatus(guarantee.status) in CLOSED_STATUSES or aggregate.has_active_dispute:
        return InvalidTransitionError(
            "Guarantee", guarantee.status, GuaranteeStatus.CANCELLED.value,
            _ctx(caller, guarantee),
        )
    if is_past(guarantee.expires_at, now):
        return ExpiredError("Guarantee", _ctx(caller, guarantee))
    # Buyer consent locks the seller out of cancelling.
    if party_of(caller, guarantee) == GuaranteeParty.SELLER and guarantee.buyer_consent:
        return ForbiddenError(
            "Cannot cancel after buyer has consented. "
            "You may raise a dispute if needed.",
            _ctx(caller, guarantee),
        )
    return None


def check_status_update(
    caller: Caller,
    aggregate: GuaranteeAggregate,
    target: GuaranteeStatus | str,
    now: datetime,
) -> GaranteError | None:
    """Guard for UpdateStatus(completed | cancelled | disputed)."""
    guarantee = aggregate.guarantee
    if not is_guarantee_party(caller, guarantee):
        return UnauthorizedError(
            "Only the seller or buyer can update the guarantee status",
            _ctx(caller, guarantee),
        )
    try:
        target = GuaranteeStatus(target)
    except ValueError:
        target = None
    if target not in UPDATABLE_GUARANTEE_TARGETS:
        return InputValidationError(
            "Status must be one of: completed, cancelled, disputed", "status",
        )
    if guarantee.status == target:
        return InvalidTransitionError(
            "Guarantee", guarantee.status, target.value, _ctx(caller, guarantee),
        )
    if target == GuaranteeStatus.COMPLETED:
        return _check_completion(caller, aggregate, now)
    if target == GuaranteeStatus.CANCELLED:
        return _check_cancellation(caller, aggregate, now)
    # disputed: either party, any time, even after completion
    return None
