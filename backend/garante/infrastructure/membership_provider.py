"""SQL Membership Provider - answers the core's membership and identity questions.

Invariants:
    - Implements core.repository_protocols.MembershipProvider
    - Read-only: never writes, runs inside the caller's transaction
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from garante.core.domain_types import MemberRole
from garante.models.business import BusinessMember
from garante.models.user import User


class SqlMembershipProvider:
    """MembershipProvider backed by the business_members / users tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def member_role(
        self, business_id: UUID, user_id: UUID,
    ) -> MemberRole | None:
        result = await self.db.execute(
            select(BusinessMember.role).where(
                BusinessMember.business_id == business_id,
                BusinessMember.user_id == user_id,
            ),
        )
        role = result.scalar_one_or_none()
        return MemberRole(role) if role is not None else None

    async def has_any_membership(self, user_id: UUID) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(BusinessMember).where(
                BusinessMember.user_id == user_id,
            ),
        )
        return result.scalar_one() > 0

    async def member_count(self, business_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(BusinessMember).where(
                BusinessMember.business_id == business_id,
            ),
        )
        return result.scalar_one()

    async def is_verified(self, user_id: UUID) -> bool:
        result = await self.db.execute(
            select(User.is_verified).where(User.id == user_id),
        )
        return bool(result.scalar_one_or_none())
