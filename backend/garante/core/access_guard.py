"""Access / Role Guard - pure capability predicates consumed by every transition.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Caller is resolved once per request and passed explicitly (no global role state)
    - is_admin is checked first by every predicate: admins satisfy every actor guard
    - party_of is identity only: an admin who is not seller/buyer has no side

Design Decisions:
    - Contextual facts (business ownership, membership role) are looked up by the
      shell and passed in as plain values, keeping this module IO-free
"""

from dataclasses import dataclass, field
from uuid import UUID

from garante.core.domain_types import (
    Capability, GuaranteeParty, MemberRole, Role,
)
from garante.core.repository_protocols import DisputeLike, GuaranteeLike


@dataclass(frozen=True)
class Caller:
    """Authenticated actor with its global capabilities."""
    user_id: UUID
    role: Role = Role.USER
    capabilities: frozenset[Capability] = field(default_factory=frozenset)

    @classmethod
    def from_role(cls, user_id: UUID, role: Role | str) -> "Caller":
        role = Role(role)
        caps: set[Capability] = set()
        if role == Role.ADMIN:
            caps.add(Capability.ADMIN)
        if role == Role.ARBITRATOR:
            caps.add(Capability.ARBITRATOR)
        return cls(user_id=user_id, role=role, capabilities=frozenset(caps))


def is_admin(caller: Caller) -> bool:
    return Capability.ADMIN in caller.capabilities


def is_arbitrator(caller: Caller) -> bool:
    return is_admin(caller) or Capability.ARBITRATOR in caller.capabilities


def is_business_owner(caller: Caller, owner_id: UUID) -> bool:
    return is_admin(caller) or caller.user_id == owner_id


def party_of(caller: Caller, guarantee: GuaranteeLike) -> GuaranteeParty | None:
    """Which side of the guarantee the caller is on, if any."""
    if caller.user_id == guarantee.seller_id:
        return GuaranteeParty.SELLER
    if caller.user_id == guarantee.buyer_id:
        return GuaranteeParty.BUYER
    return None


def is_guarantee_party(
    caller: Caller,
    guarantee: GuaranteeLike,
    side: GuaranteeParty | None = None,
) -> bool:
    """Caller is the given side (or either side when side is None)."""
    if is_admin(caller):
        return True
    party = party_of(caller, guarantee)
    if side is None:
        return party is not None
    return party == side


def is_dispute_party(
    caller: Caller, dispute: DisputeLike, guarantee: GuaranteeLike,
) -> bool:
    """Initiator or counter-party of the dispute."""
    if dispute.guarantee_id != guarantee.id:
        return False
    return is_guarantee_party(caller, guarantee)


def can_view_dispute(
    caller: Caller, dispute: DisputeLike, guarantee: GuaranteeLike,
) -> bool:
    return is_arbitrator(caller) or is_dispute_party(caller, dispute, guarantee)


def can_view_guarantee(caller: Caller, guarantee: GuaranteeLike) -> bool:
    return is_arbitrator(caller) or is_guarantee_party(caller, guarantee)


def capabilities_for(
    caller: Caller,
    guarantee: GuaranteeLike | None = None,
    owner_id: UUID | None = None,
    member_role: MemberRole | None = None,
) -> frozenset[Capability]:
    """Global capabilities plus those earned from the given context.

    Contextual capabilities are facts, so admins only hold the ones they earn.
    """
    caps = set(caller.capabilities)
    if owner_id is not None and caller.user_id == owner_id:
        caps.add(Capability.OWNER)
    if member_role is not None:
        caps.add(Capability.MEMBER)
    if guarantee is not None and party_of(caller, guarantee) is not None:
        caps.add(Capability.PARTY)
    return frozenset(caps)
