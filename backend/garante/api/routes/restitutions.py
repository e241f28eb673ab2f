"""Restitution Routes - show, process (seller) and complete (buyer or arbitrator)."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from garante.api.dependencies import get_caller
from garante.core.access_guard import Caller
from garante.infrastructure.database import get_db
from garante.schemas.restitution import RestitutionProcess, RestitutionResponse
from garante.services.restitution_service import RestitutionService

router = APIRouter(prefix="/api/v1/restitutions", tags=["restitutions"])


@router.get("/{restitution_id}", response_model=RestitutionResponse)
async def get_restitution(
    restitution_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    restitution = await RestitutionService(db).show(caller, restitution_id)
    return RestitutionResponse.model_validate(restitution)


@router.post("/{restitution_id}/process", response_model=RestitutionResponse)
async def process_restitution(
    restitution_id: UUID,
    body: RestitutionProcess,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    restitution = await RestitutionService(db).process(
        caller, restitution_id, body.proof_of_payment,
    )
    return RestitutionResponse.model_validate(restitution)


@router.post("/{restitution_id}/complete", response_model=RestitutionResponse)
async def complete_restitution(
    restitution_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Confirm receipt. Restores the seller's trust score."""
    restitution = await RestitutionService(db).complete(caller, restitution_id)
    return RestitutionResponse.model_validate(restitution)
