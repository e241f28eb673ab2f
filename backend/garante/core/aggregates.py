"""Aggregates - fully-hydrated entity bundles handed from shell to core.

Invariants:
    - Ownership flows Guarantee -> Dispute -> Verdict -> Restitution
    - Core never fetches: everything a transition reads is on the aggregate
    - `disputes` holds every dispute of the guarantee (for the one-active rule)
"""

from dataclasses import dataclass, field

from garante.core.domain_types import ACTIVE_DISPUTE_STATUSES, DisputeStatus
from garante.core.repository_protocols import (
    DisputeLike, GuaranteeLike, RestitutionLike, UserLike, VerdictLike,
)


@dataclass
class GuaranteeAggregate:
    """A guarantee with its seller and dispute chain."""
    guarantee: GuaranteeLike
    seller: UserLike | None = None
    disputes: list[DisputeLike] = field(default_factory=list)
    verdict: VerdictLike | None = None
    restitution: RestitutionLike | None = None

    @property
    def active_dispute(self) -> DisputeLike | None:
        for dispute in self.disputes:
            if DisputeStatus(dispute.status) in ACTIVE_DISPUTE_STATUSES:
                return dispute
        return None

    @property
    def has_active_dispute(self) -> bool:
        return self.active_dispute is not None
