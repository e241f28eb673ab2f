"""Edit Lock Service - counts active disputes touching a profile or business.

Invariants:
    - Read-only
    - "Active" means pending or in_review, matching the one-active-dispute rule
"""

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from garante.core.access_guard import Caller
from garante.core.domain_types import ACTIVE_DISPUTE_STATUSES
from garante.core.enforce_edit_lock import check_business_edit, check_profile_edit
from garante.core.errors import GaranteError, ResourceNotFoundError
from garante.models.business import Business
from garante.models.dispute import Dispute
from garante.models.guarantee import Guarantee
from garante.models.user import User

_ACTIVE = [status.value for status in ACTIVE_DISPUTE_STATUSES]


class EditLockService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count_active(self, *conditions) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Dispute)
            .join(Guarantee, Guarantee.id == Dispute.guarantee_id)
            .where(Dispute.status.in_(_ACTIVE), *conditions),
        )
        return result.scalar_one()

    async def profile_eligibility(
        self, caller: Caller, user_id: UUID,
    ) -> tuple[GaranteError | None, int]:
        if await self.db.get(User, user_id) is None:
            raise ResourceNotFoundError("User", str(user_id))
        active = await self._count_active(
            or_(Guarantee.seller_id == user_id, Guarantee.buyer_id == user_id),
        )
        return check_profile_edit(caller, user_id, active), active

    async def business_eligibility(
        self, caller: Caller, business_id: UUID,
    ) -> tuple[GaranteError | None, int]:
        business = await self.db.get(Business, business_id)
        if business is None:
            raise ResourceNotFoundError("Business", str(business_id))
        active = await self._count_active(Guarantee.business_id == business_id)
        return check_business_edit(caller, business.owner_id, active), active
