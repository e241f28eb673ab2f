"""Dispute Routes - open, defend, resolve and read disputes.

Invariants:
    - Resolve returns dispute, verdict and (for refunds) restitution together
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garante.api.dependencies import get_caller
from garante.core.access_guard import Caller
from garante.infrastructure.database import get_db
from garante.schemas.dispute import (
    DefenseCreate, DisputeCreate, DisputeDetailResponse, DisputeListResponse,
    DisputeResponse, ResolveRequest, ResolveResponse, VerdictResponse,
)
from garante.schemas.restitution import RestitutionResponse
from garante.services.dispute_service import DisputeService

router = APIRouter(prefix="/api/v1/disputes", tags=["disputes"])


@router.post(
    "", response_model=DisputeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def open_dispute(
    body: DisputeCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Buyer raises a dispute against a guarantee."""
    dispute = await DisputeService(db).open(
        caller,
        guarantee_id=body.guarantee_id,
        reason=body.reason,
        description=body.description,
        evidence=body.evidence,
    )
    return DisputeResponse.model_validate(dispute)


@router.get("", response_model=DisputeListResponse)
async def list_disputes(
    limit: int = Query(15, ge=1, le=100),
    offset: int = Query(0, ge=0),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    disputes = await DisputeService(db).list_for(caller, limit=limit, offset=offset)
    return DisputeListResponse(
        disputes=[DisputeResponse.model_validate(d) for d in disputes],
        pagination={"limit": limit, "offset": offset},
    )


@router.get("/{dispute_id}", response_model=DisputeDetailResponse)
async def get_dispute(
    dispute_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    dispute, verdict, restitution = await DisputeService(db).show(caller, dispute_id)
    return DisputeDetailResponse(
        dispute=DisputeResponse.model_validate(dispute),
        verdict=VerdictResponse.model_validate(verdict) if verdict else None,
        restitution=(
            RestitutionResponse.model_validate(restitution) if restitution else None
        ),
    )


@router.post("/{dispute_id}/defense", response_model=DisputeResponse)
async def submit_defense(
    dispute_id: UUID,
    body: DefenseCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    dispute = await DisputeService(db).submit_defense(
        caller, dispute_id, body.defense, body.defense_description,
    )
    return DisputeResponse.model_validate(dispute)


@router.post("/{dispute_id}/resolve", response_model=ResolveResponse)
async def resolve_dispute(
    dispute_id: UUID,
    body: ResolveRequest,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Arbitrator verdict. Penalizes the seller and opens restitution for refunds."""
    resolution = await DisputeService(db).resolve(
        caller, dispute_id,
        decision=body.decision,
        notes=body.notes,
        refund_amount=body.refund_amount,
    )
    return ResolveResponse(
        dispute=DisputeResponse.model_validate(resolution.dispute),
        verdict=VerdictResponse.model_validate(resolution.verdict),
        restitution=(
            RestitutionResponse.model_validate(resolution.restitution)
            if resolution.restitution else None
        ),
    )
