"""Guarantee Service - create, accept, consent and status transitions.

Invariants:
    - One transaction per call: load (locked) -> guard -> apply -> commit
    - A guard error is raised before any mutation, so a failed call writes nothing
    - Consent activation (draft/accepted -> active) is logged separately from the consent itself

Design Decisions:
    - Services take an optional `now` so tests can pin the clock without patching
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from garante.core.access_guard import Caller, can_view_guarantee
from garante.core.clock import utc_now
from garante.core.domain_types import GuaranteeStatus
from garante.core.enforce_guarantee import (
    check_accept, check_consent, check_create, check_status_update,
)
from garante.core.errors import (
    ErrorContext, InputValidationError, UnauthorizedError,
)
from garante.core.guarantee_transitions import (
    apply_accept, apply_consent, apply_status,
)
from garante.infrastructure.database import commit
from garante.infrastructure.membership_provider import SqlMembershipProvider
from garante.models.business import Business
from garante.models.dispute import Dispute
from garante.models.guarantee import Guarantee
from garante.models.user import User
from garante.services.aggregate_loader import get_guarantee, load_aggregate

logger = logging.getLogger(__name__)

LIST_TYPES = ("active", "expired")


class GuaranteeService:
    """Guarantee lifecycle operations for one request."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.members = SqlMembershipProvider(db)

    async def create(
        self,
        caller: Caller,
        business_id: UUID,
        buyer_id: UUID,
        service_description: str,
        price: Decimal,
        terms: dict[str, Any],
        expires_at: datetime | None = None,
        now: datetime | None = None,
    ) -> Guarantee:
        """Seller (the caller) drafts a guarantee on behalf of their business."""
        now = now or utc_now()
        if await self.db.get(Business, business_id) is None:
            raise InputValidationError("Business does not exist", "business_id")
        if await self.db.get(User, buyer_id) is None:
            raise InputValidationError("Buyer does not exist", "buyer_id")
        if buyer_id == caller.user_id:
            raise InputValidationError(
                "Buyer must be a different user than the seller", "buyer_id",
            )

        error = check_create(
            caller,
            member_role=await self.members.member_role(business_id, caller.user_id),
            seller_verified=await self.members.is_verified(caller.user_id),
            price=price,
            expires_at=expires_at,
            service_description=service_description,
            now=now,
        )
        if error:
            raise error

        guarantee = Guarantee(
            seller_id=caller.user_id,
            buyer_id=buyer_id,
            business_id=business_id,
            service_description=service_description,
            price=price,
            terms=terms,
            expires_at=expires_at,
            status=GuaranteeStatus.DRAFT.value,
            created_at=now,
        )
        self.db.add(guarantee)
        await commit(self.db)
        logger.info(
            "Guarantee created",
            extra={"guarantee_id": str(guarantee.id), "user_id": str(caller.user_id)},
        )
        return guarantee

    async def accept(
        self, caller: Caller, guarantee_id: UUID, now: datetime | None = None,
    ) -> Guarantee:
        now = now or utc_now()
        guarantee = await get_guarantee(self.db, guarantee_id, lock=True)
        error = check_accept(caller, guarantee, now)
        if error:
            raise error
        apply_accept(guarantee, now)
        await commit(self.db)
        logger.info(
            "Guarantee accepted",
            extra={"guarantee_id": str(guarantee.id), "user_id": str(caller.user_id)},
        )
        return guarantee

    async def give_consent(
        self, caller: Caller, guarantee_id: UUID, now: datetime | None = None,
    ) -> Guarantee:
        """Record the caller's consent; both consents activate the guarantee."""
        now = now or utc_now()
        guarantee = await get_guarantee(self.db, guarantee_id, lock=True)
        error = check_consent(caller, guarantee, now)
        if error:
            raise error
        activated = apply_consent(caller, guarantee)
        await commit(self.db)
        extra = {"guarantee_id": str(guarantee.id), "user_id": str(caller.user_id)}
        logger.info("Consent recorded", extra=extra)
        if activated:
            logger.info("Guarantee activated by mutual consent", extra=extra)
        return guarantee

    async def update_status(
        self,
        caller: Caller,
        guarantee_id: UUID,
        target: str,
        now: datetime | None = None,
    ) -> Guarantee:
        now = now or utc_now()
        aggregate = await load_aggregate(self.db, guarantee_id)
        error = check_status_update(caller, aggregate, target, now)
        if error:
            raise error
        previous = aggregate.guarantee.status
        apply_status(aggregate.guarantee, target, now)
        await commit(self.db)
        logger.info(
            f"Guarantee status {previous} -> {target}",
            extra={
                "guarantee_id": str(guarantee_id), "user_id": str(caller.user_id),
            },
        )
        return aggregate.guarantee

    # ─── Reads ───────────────────────────────────────────────────

    async def list_for(
        self,
        caller: Caller,
        status: str | None = None,
        list_type: str | None = None,
        limit: int = 15,
        offset: int = 0,
        now: datetime | None = None,
    ) -> list[Guarantee]:
        """Guarantees where the caller is seller or buyer, newest first."""
        now = now or utc_now()
        if list_type is not None and list_type not in LIST_TYPES:
            raise InputValidationError("type must be one of: active, expired", "type")
        query = select(Guarantee).where(
            or_(
                Guarantee.seller_id == caller.user_id,
                Guarantee.buyer_id == caller.user_id,
            ),
        )
        if status:
            query = query.where(Guarantee.status == status)
        if list_type == "active":
            query = query.where(
                Guarantee.status == GuaranteeStatus.ACTIVE.value,
                or_(Guarantee.expires_at.is_(None), Guarantee.expires_at > now),
            )
        elif list_type == "expired":
            query = query.where(Guarantee.expires_at <= now)
        query = (
            query.order_by(Guarantee.created_at.desc()).limit(limit).offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def show(
        self, caller: Caller, guarantee_id: UUID,
    ) -> tuple[Guarantee, list[Dispute]]:
        guarantee = await get_guarantee(self.db, guarantee_id)
        if not can_view_guarantee(caller, guarantee):
            raise UnauthorizedError(
                "Only the parties can view this guarantee",
                ErrorContext(
                    user_id=str(caller.user_id), guarantee_id=str(guarantee_id),
                ),
            )
        result = await self.db.execute(
            select(Dispute)
            .where(Dispute.guarantee_id == guarantee_id)
            .order_by(Dispute.created_at),
        )
        return guarantee, list(result.scalars().all())
