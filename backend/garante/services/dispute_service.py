"""Dispute Service - open, defend and resolve; resolve persists verdict, restitution and trust together.

Invariants:
    - One transaction per call; the guarantee row is locked before the dispute row
    - Resolve writes dispute status, verdict, optional restitution, seller trust score
      and (on a seller win) the guarantee's completion in a single commit
    - A second resolve observes the committed verdict and fails AlreadyResolved;
      the trust score moves exactly once per verdict

Design Decisions:
    - The unique constraint on verdicts.dispute_id backs the row lock: a race that
      slips past the lock fails at commit with ConcurrencyError
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from garante.config import Settings, get_settings
from garante.core.access_guard import Caller, can_view_dispute, is_arbitrator
from garante.core.clock import utc_now
from garante.core.dispute_transitions import (
    apply_defense, apply_open, apply_resolve,
)
from garante.core.domain_types import DisputeStatus
from garante.core.enforce_dispute import (
    check_defense, check_open, check_resolve,
)
from garante.core.errors import ErrorContext, UnauthorizedError
from garante.infrastructure.database import commit
from garante.models.dispute import Dispute
from garante.models.guarantee import Guarantee
from garante.models.restitution import Restitution
from garante.models.verdict import Verdict
from garante.services.aggregate_loader import (
    get_dispute, get_guarantee, get_restitution_for_verdict,
    get_verdict_for_dispute, load_aggregate,
)

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Rows produced by a successful resolve."""
    dispute: Dispute
    verdict: Verdict
    restitution: Restitution | None


class DisputeService:
    """Dispute workflow operations for one request."""

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    async def open(
        self,
        caller: Caller,
        guarantee_id: UUID,
        reason: str,
        description: str,
        evidence: dict[str, Any],
        now: datetime | None = None,
    ) -> Dispute:
        """Buyer raises a dispute; the guarantee moves to disputed."""
        now = now or utc_now()
        aggregate = await load_aggregate(self.db, guarantee_id)
        error = check_open(caller, aggregate, reason, description, evidence)
        if error:
            raise error

        dispute = Dispute(
            guarantee_id=guarantee_id,
            initiated_by=caller.user_id,
            reason=reason,
            description=description,
            evidence=evidence,
            status=DisputeStatus.PENDING.value,
            created_at=now,
        )
        self.db.add(dispute)
        apply_open(aggregate.guarantee)
        await commit(self.db)
        logger.info(
            "Dispute opened",
            extra={
                "dispute_id": str(dispute.id),
                "guarantee_id": str(guarantee_id),
                "user_id": str(caller.user_id),
            },
        )
        return dispute

    async def submit_defense(
        self,
        caller: Caller,
        dispute_id: UUID,
        defense: dict[str, Any],
        defense_description: str,
    ) -> Dispute:
        unlocked = await get_dispute(self.db, dispute_id)
        guarantee = await get_guarantee(self.db, unlocked.guarantee_id, lock=True)
        dispute = await get_dispute(self.db, dispute_id, lock=True)
        error = check_defense(caller, dispute, guarantee, defense, defense_description)
        if error:
            raise error
        apply_defense(dispute, defense, defense_description)
        await commit(self.db)
        logger.info(
            "Defense submitted, dispute in review",
            extra={"dispute_id": str(dispute.id), "user_id": str(caller.user_id)},
        )
        return dispute

    async def resolve(
        self,
        caller: Caller,
        dispute_id: UUID,
        decision: str,
        notes: str,
        refund_amount: Decimal | None = None,
        now: datetime | None = None,
    ) -> Resolution:
        """Arbitrator decides; penalty, verdict and restitution land atomically."""
        now = now or utc_now()
        unlocked = await get_dispute(self.db, dispute_id)
        aggregate = await load_aggregate(
            self.db, unlocked.guarantee_id, dispute_id=dispute_id,
        )
        dispute = next(d for d in aggregate.disputes if d.id == dispute_id)
        error = check_resolve(
            caller, dispute, aggregate, decision, refund_amount, notes, now,
            self.settings.dispute_cooling_off_business_days,
        )
        if error:
            raise error

        outcome = apply_resolve(
            caller, aggregate, dispute, decision, refund_amount, notes, now,
        )
        verdict = Verdict(
            dispute_id=dispute.id,
            guarantee_id=aggregate.guarantee.id,
            arbitrator_id=caller.user_id,
            winner_id=outcome.winner_id,
            decision=outcome.decision.value,
            refund_amount=outcome.refund_amount,
            notes=notes,
            evidence_reviewed=outcome.evidence_reviewed,
            decided_at=now,
        )
        self.db.add(verdict)
        restitution = None
        if outcome.requires_restitution:
            await self.db.flush()
            restitution = Restitution(
                verdict_id=verdict.id,
                amount=outcome.restitution_amount,
                created_at=now,
            )
            self.db.add(restitution)
        await commit(self.db)

        logger.info(
            f"Dispute resolved: {outcome.decision.value}",
            extra={
                "dispute_id": str(dispute.id),
                "guarantee_id": str(aggregate.guarantee.id),
                "user_id": str(caller.user_id),
                "decision": outcome.decision.value,
            },
        )
        if outcome.trust_delta:
            logger.info(
                f"Seller trust score {outcome.trust_before} -> {outcome.trust_after}",
                extra={
                    "user_id": str(aggregate.seller.id),
                    "trust_delta": outcome.trust_delta,
                },
            )
        if outcome.guarantee_completed:
            logger.info(
                "Guarantee completed by seller-favourable verdict",
                extra={"guarantee_id": str(aggregate.guarantee.id)},
            )
        return Resolution(dispute=dispute, verdict=verdict, restitution=restitution)

    # ─── Reads ───────────────────────────────────────────────────

    async def list_for(
        self, caller: Caller, limit: int = 15, offset: int = 0,
    ) -> list[Dispute]:
        """Arbitrators see every unresolved dispute; parties see their own."""
        if is_arbitrator(caller):
            query = select(Dispute).where(
                Dispute.status != DisputeStatus.RESOLVED.value,
            )
        else:
            query = (
                select(Dispute)
                .join(Guarantee, Guarantee.id == Dispute.guarantee_id)
                .where(
                    or_(
                        Guarantee.seller_id == caller.user_id,
                        Guarantee.buyer_id == caller.user_id,
                    ),
                )
            )
        query = query.order_by(Dispute.created_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def show(
        self, caller: Caller, dispute_id: UUID,
    ) -> tuple[Dispute, Verdict | None, Restitution | None]:
        dispute = await get_dispute(self.db, dispute_id)
        guarantee = await get_guarantee(self.db, dispute.guarantee_id)
        if not can_view_dispute(caller, dispute, guarantee):
            raise UnauthorizedError(
                "Only the parties or an arbitrator can view this dispute",
                ErrorContext(user_id=str(caller.user_id), dispute_id=str(dispute_id)),
            )
        verdict = await get_verdict_for_dispute(self.db, dispute_id)
        restitution = None
        if verdict is not None:
            restitution = await get_restitution_for_verdict(self.db, verdict.id)
        return dispute, verdict, restitution
