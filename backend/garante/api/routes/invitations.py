"""Invitation Routes - owner invites; invitee lists, accepts and rejects.

Invariants:
    - Inviting lives under /businesses/{id}; responding lives under /invitations/{id}
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from garante.api.dependencies import get_caller
from garante.core.access_guard import Caller
from garante.infrastructure.database import get_db
from garante.schemas.invitation import InvitationCreate, InvitationResponse
from garante.services.invitation_service import InvitationService

business_router = APIRouter(prefix="/api/v1/businesses", tags=["invitations"])
router = APIRouter(prefix="/api/v1/invitations", tags=["invitations"])


@business_router.post(
    "/{business_id}/invitations", response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    business_id: UUID,
    body: InvitationCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    invitation = await InvitationService(db).invite(
        caller, business_id, body.user_id, body.role,
    )
    return InvitationResponse.model_validate(invitation)


@router.get("", response_model=list[InvitationResponse])
async def list_pending_invitations(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    invitations = await InvitationService(db).list_pending(caller)
    return [InvitationResponse.model_validate(inv) for inv in invitations]


@router.post("/{invitation_id}/accept", response_model=InvitationResponse)
async def accept_invitation(
    invitation_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Accept and join the business in one transaction."""
    invitation = await InvitationService(db).accept(caller, invitation_id)
    return InvitationResponse.model_validate(invitation)


@router.post("/{invitation_id}/reject", response_model=InvitationResponse)
async def reject_invitation(
    invitation_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    invitation = await InvitationService(db).reject(caller, invitation_id)
    return InvitationResponse.model_validate(invitation)
