"""Restitution Service - seller attests payment, buyer or arbitrator confirms receipt.

Invariants:
    - Guarantee row is locked before the restitution row (same order as resolve)
    - Completion restores the seller's trust score in the same commit as the status change
    - A buyer-favourable verdict completes the guarantee when its restitution completes
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garante.core.access_guard import Caller
from garante.core.aggregates import GuaranteeAggregate
from garante.core.clock import utc_now
from garante.core.enforce_restitution import (
    can_view_restitution, check_complete, check_process,
)
from garante.core.errors import ErrorContext, UnauthorizedError
from garante.core.restitution_transitions import apply_complete, apply_process
from garante.infrastructure.database import commit
from garante.models.restitution import Restitution
from garante.models.verdict import Verdict
from garante.services.aggregate_loader import (
    get_guarantee, get_restitution, load_aggregate,
)

logger = logging.getLogger(__name__)


class RestitutionService:
    """Restitution operations for one request."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, restitution_id: UUID) -> GuaranteeAggregate:
        restitution = await get_restitution(self.db, restitution_id)
        verdict = await self.db.get(Verdict, restitution.verdict_id)
        return await load_aggregate(
            self.db, verdict.guarantee_id, dispute_id=verdict.dispute_id,
        )

    async def process(
        self,
        caller: Caller,
        restitution_id: UUID,
        proof_of_payment: str,
        now: datetime | None = None,
    ) -> Restitution:
        now = now or utc_now()
        aggregate = await self._load(restitution_id)
        restitution = aggregate.restitution
        error = check_process(caller, restitution, aggregate.guarantee, proof_of_payment)
        if error:
            raise error
        apply_process(restitution, proof_of_payment, now)
        await commit(self.db)
        logger.info(
            "Restitution processed",
            extra={
                "restitution_id": str(restitution.id), "user_id": str(caller.user_id),
            },
        )
        return restitution

    async def complete(
        self, caller: Caller, restitution_id: UUID, now: datetime | None = None,
    ) -> Restitution:
        """Confirm receipt; restores the penalty the verdict imposed."""
        now = now or utc_now()
        aggregate = await self._load(restitution_id)
        restitution = aggregate.restitution
        error = check_complete(caller, restitution, aggregate.guarantee)
        if error:
            raise error
        outcome = apply_complete(caller, aggregate, now)
        await commit(self.db)

        logger.info(
            "Restitution completed",
            extra={
                "restitution_id": str(restitution.id), "user_id": str(caller.user_id),
            },
        )
        logger.info(
            f"Seller trust score {outcome.trust_before} -> {outcome.trust_after}",
            extra={
                "user_id": str(aggregate.seller.id),
                "trust_delta": outcome.trust_after - outcome.trust_before,
            },
        )
        if outcome.guarantee_completed:
            logger.info(
                "Guarantee completed after restitution",
                extra={"guarantee_id": str(aggregate.guarantee.id)},
            )
        return restitution

    async def show(self, caller: Caller, restitution_id: UUID) -> Restitution:
        restitution = await get_restitution(self.db, restitution_id)
        verdict = await self.db.get(Verdict, restitution.verdict_id)
        guarantee = await get_guarantee(self.db, verdict.guarantee_id)
        if not can_view_restitution(caller, guarantee):
            raise UnauthorizedError(
                "Only the parties or an arbitrator can view this restitution",
                ErrorContext(
                    user_id=str(caller.user_id), restitution_id=str(restitution_id),
                ),
            )
        return restitution
