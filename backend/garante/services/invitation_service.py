"""Invitation Service - owners invite verified users; invitees accept or reject.

Invariants:
    - Accepting writes the invitation status and the membership row in one commit
    - An invitee who joined another business meanwhile gets the invitation rejected,
      and the accept call fails Forbidden
    - Listing pending invitations first expires the stale ones
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garante.config import Settings, get_settings
from garante.core.access_guard import Caller
from garante.core.clock import utc_now
from garante.core.domain_types import InvitationStatus, MemberRole
from garante.core.enforce_invitation import check_invite, check_respond
from garante.core.errors import ErrorContext, ForbiddenError, ResourceNotFoundError
from garante.core.invitation_transitions import (
    apply_accept, apply_expire, apply_reject, expiry_for,
)
from garante.infrastructure.database import commit
from garante.infrastructure.membership_provider import SqlMembershipProvider
from garante.models.business import Business, BusinessMember
from garante.models.business_invitation import BusinessInvitation
from garante.models.user import User

logger = logging.getLogger(__name__)


class InvitationService:
    """Business invitation operations for one request."""

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.members = SqlMembershipProvider(db)

    async def _get_invitation(self, invitation_id: UUID) -> BusinessInvitation:
        result = await self.db.execute(
            select(BusinessInvitation)
            .where(BusinessInvitation.id == invitation_id)
            .with_for_update(),
        )
        invitation = result.scalar_one_or_none()
        if invitation is None:
            raise ResourceNotFoundError("Invitation", str(invitation_id))
        return invitation

    async def invite(
        self,
        caller: Caller,
        business_id: UUID,
        user_id: UUID,
        role: str = MemberRole.STAFF.value,
        now: datetime | None = None,
    ) -> BusinessInvitation:
        now = now or utc_now()
        result = await self.db.execute(
            select(Business).where(Business.id == business_id).with_for_update(),
        )
        business = result.scalar_one_or_none()
        if business is None:
            raise ResourceNotFoundError("Business", str(business_id))
        if await self.db.get(User, user_id) is None:
            raise ResourceNotFoundError("User", str(user_id))

        pending = await self.db.execute(
            select(BusinessInvitation.id).where(
                BusinessInvitation.business_id == business_id,
                BusinessInvitation.user_id == user_id,
                BusinessInvitation.status == InvitationStatus.PENDING.value,
            ),
        )
        error = check_invite(
            caller,
            owner_id=business.owner_id,
            business_verified=business.is_verified,
            member_count=await self.members.member_count(business_id),
            member_limit=self.settings.business_member_limit,
            invitee_verified=await self.members.is_verified(user_id),
            invitee_has_membership=await self.members.has_any_membership(user_id),
            has_pending_invitation=pending.first() is not None,
            role=role,
        )
        if error:
            raise error

        invitation = BusinessInvitation(
            business_id=business_id,
            user_id=user_id,
            role=MemberRole(role).value,
            status=InvitationStatus.PENDING.value,
            expires_at=expiry_for(now, self.settings.invitation_ttl_days),
            created_at=now,
        )
        self.db.add(invitation)
        await commit(self.db)
        logger.info(
            "Invitation sent",
            extra={
                "invitation_id": str(invitation.id),
                "business_id": str(business_id),
                "user_id": str(user_id),
            },
        )
        return invitation

    async def accept(
        self, caller: Caller, invitation_id: UUID, now: datetime | None = None,
    ) -> BusinessInvitation:
        now = now or utc_now()
        invitation = await self._get_invitation(invitation_id)
        error = check_respond(caller, invitation, now)
        if error:
            raise error

        if await self.members.has_any_membership(caller.user_id):
            apply_reject(invitation, now)
            await commit(self.db)
            logger.info(
                "Invitation auto-rejected: invitee already belongs to a business",
                extra={"invitation_id": str(invitation.id)},
            )
            raise ForbiddenError(
                "You are already a member of another business",
                ErrorContext(user_id=str(caller.user_id)),
            )

        apply_accept(invitation, now)
        self.db.add(BusinessMember(
            business_id=invitation.business_id,
            user_id=invitation.user_id,
            role=invitation.role,
            created_at=now,
        ))
        await commit(self.db)
        logger.info(
            "Invitation accepted, membership created",
            extra={
                "invitation_id": str(invitation.id),
                "business_id": str(invitation.business_id),
                "user_id": str(caller.user_id),
            },
        )
        return invitation

    async def reject(
        self, caller: Caller, invitation_id: UUID, now: datetime | None = None,
    ) -> BusinessInvitation:
        now = now or utc_now()
        invitation = await self._get_invitation(invitation_id)
        error = check_respond(caller, invitation, now, enforce_expiry=False)
        if error:
            raise error
        apply_reject(invitation, now)
        await commit(self.db)
        logger.info(
            "Invitation rejected",
            extra={"invitation_id": str(invitation.id), "user_id": str(caller.user_id)},
        )
        return invitation

    async def list_pending(
        self, caller: Caller, now: datetime | None = None,
    ) -> list[BusinessInvitation]:
        """Caller's pending invitations; stale ones are expired on the way."""
        now = now or utc_now()
        result = await self.db.execute(
            select(BusinessInvitation)
            .where(
                BusinessInvitation.user_id == caller.user_id,
                BusinessInvitation.status == InvitationStatus.PENDING.value,
            )
            .order_by(BusinessInvitation.created_at.desc()),
        )
        invitations = list(result.scalars().all())
        expired = [inv for inv in invitations if apply_expire(inv, now)]
        if expired:
            await commit(self.db)
            logger.info(f"Expired {len(expired)} stale invitation(s)")
        return [inv for inv in invitations if inv not in expired]
