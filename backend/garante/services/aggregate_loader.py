"""Aggregate Loader - hydrates a GuaranteeAggregate inside the caller's transaction.

Invariants:
    - Rows are read with SELECT ... FOR UPDATE (no-op on SQLite)
    - Lock order is always guarantee -> seller -> disputes -> verdict -> restitution,
      so two transitions on the same guarantee serialize instead of deadlocking
    - Missing rows raise ResourceNotFoundError; core never sees a partial aggregate

Design Decisions:
    - Explicit queries instead of relationship() chains: every read is visible here
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from garante.core.aggregates import GuaranteeAggregate
from garante.core.errors import ResourceNotFoundError
from garante.models.dispute import Dispute
from garante.models.guarantee import Guarantee
from garante.models.restitution import Restitution
from garante.models.user import User
from garante.models.verdict import Verdict


def _locked(query: Select, lock: bool) -> Select:
    """Add FOR UPDATE and refresh rows already in the identity map."""
    if not lock:
        return query
    return query.with_for_update().execution_options(populate_existing=True)


async def get_guarantee(
    db: AsyncSession, guarantee_id: UUID, lock: bool = False,
) -> Guarantee:
    query = select(Guarantee).where(Guarantee.id == guarantee_id)
    query = _locked(query, lock)
    result = await db.execute(query)
    guarantee = result.scalar_one_or_none()
    if guarantee is None:
        raise ResourceNotFoundError("Guarantee", str(guarantee_id))
    return guarantee


async def get_dispute(
    db: AsyncSession, dispute_id: UUID, lock: bool = False,
) -> Dispute:
    query = select(Dispute).where(Dispute.id == dispute_id)
    query = _locked(query, lock)
    result = await db.execute(query)
    dispute = result.scalar_one_or_none()
    if dispute is None:
        raise ResourceNotFoundError("Dispute", str(dispute_id))
    return dispute


async def get_restitution(
    db: AsyncSession, restitution_id: UUID, lock: bool = False,
) -> Restitution:
    query = select(Restitution).where(Restitution.id == restitution_id)
    query = _locked(query, lock)
    result = await db.execute(query)
    restitution = result.scalar_one_or_none()
    if restitution is None:
        raise ResourceNotFoundError("Restitution", str(restitution_id))
    return restitution


async def get_verdict_for_dispute(
    db: AsyncSession, dispute_id: UUID,
) -> Verdict | None:
    result = await db.execute(
        select(Verdict).where(Verdict.dispute_id == dispute_id),
    )
    return result.scalar_one_or_none()


async def get_restitution_for_verdict(
    db: AsyncSession, verdict_id: UUID, lock: bool = False,
) -> Restitution | None:
    query = select(Restitution).where(Restitution.verdict_id == verdict_id)
    query = _locked(query, lock)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def load_aggregate(
    db: AsyncSession,
    guarantee_id: UUID,
    dispute_id: UUID | None = None,
    lock: bool = True,
) -> GuaranteeAggregate:
    """Load guarantee, seller and disputes; verdict/restitution of dispute_id if given."""
    guarantee = await get_guarantee(db, guarantee_id, lock=lock)

    seller_query = select(User).where(User.id == guarantee.seller_id)
    seller_query = _locked(seller_query, lock)
    seller = (await db.execute(seller_query)).scalar_one()

    disputes_query = (
        select(Dispute)
        .where(Dispute.guarantee_id == guarantee.id)
        .order_by(Dispute.created_at)
    )
    disputes_query = _locked(disputes_query, lock)
    disputes = list((await db.execute(disputes_query)).scalars().all())

    verdict = None
    restitution = None
    if dispute_id is not None:
        verdict = await get_verdict_for_dispute(db, dispute_id)
        if verdict is not None:
            restitution = await get_restitution_for_verdict(
                db, verdict.id, lock=lock,
            )

    return GuaranteeAggregate(
        guarantee=guarantee,
        seller=seller,
        disputes=disputes,
        verdict=verdict,
        restitution=restitution,
    )
