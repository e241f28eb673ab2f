"""Guarantee Routes - create, read, accept, consent and status updates.

Invariants:
    - Every route resolves the caller via get_caller before touching the service
    - Mutations return the updated guarantee
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garante.api.dependencies import get_caller
from garante.core.access_guard import Caller
from garante.infrastructure.database import get_db
from garante.schemas.dispute import DisputeResponse
from garante.schemas.guarantee import (
    GuaranteeCreate, GuaranteeDetailResponse, GuaranteeListResponse,
    GuaranteeResponse, GuaranteeStatusUpdate,
)
from garante.services.guarantee_service import GuaranteeService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/guarantees", tags=["guarantees"])


@router.post(
    "", response_model=GuaranteeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_guarantee(
    body: GuaranteeCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Create a draft guarantee with the caller as seller."""
    guarantee = await GuaranteeService(db).create(
        caller,
        business_id=body.business_id,
        buyer_id=body.buyer_id,
        service_description=body.service_description,
        price=body.price,
        terms=body.terms,
        expires_at=body.expires_at,
    )
    return GuaranteeResponse.model_validate(guarantee)


@router.get("", response_model=GuaranteeListResponse)
async def list_guarantees(
    limit: int = Query(15, ge=1, le=100),
    offset: int = Query(0, ge=0),
    status_filter: str | None = Query(None, alias="status"),
    list_type: str | None = Query(None, alias="type"),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Guarantees where the caller is seller or buyer."""
    guarantees = await GuaranteeService(db).list_for(
        caller, status=status_filter, list_type=list_type,
        limit=limit, offset=offset,
    )
    return GuaranteeListResponse(
        guarantees=[GuaranteeResponse.model_validate(g) for g in guarantees],
        pagination={"limit": limit, "offset": offset},
    )


@router.get("/{guarantee_id}", response_model=GuaranteeDetailResponse)
async def get_guarantee(
    guarantee_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    guarantee, disputes = await GuaranteeService(db).show(caller, guarantee_id)
    return GuaranteeDetailResponse(
        **GuaranteeResponse.model_validate(guarantee).model_dump(),
        disputes=[DisputeResponse.model_validate(d) for d in disputes],
    )


@router.post("/{guarantee_id}/accept", response_model=GuaranteeResponse)
async def accept_guarantee(
    guarantee_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    guarantee = await GuaranteeService(db).accept(caller, guarantee_id)
    return GuaranteeResponse.model_validate(guarantee)


@router.post("/{guarantee_id}/consent", response_model=GuaranteeResponse)
async def give_consent(
    guarantee_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Record the caller's consent; activates the guarantee once both agreed."""
    guarantee = await GuaranteeService(db).give_consent(caller, guarantee_id)
    return GuaranteeResponse.model_validate(guarantee)


@router.put("/{guarantee_id}/status", response_model=GuaranteeResponse)
async def update_status(
    guarantee_id: UUID,
    body: GuaranteeStatusUpdate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    guarantee = await GuaranteeService(db).update_status(
        caller, guarantee_id, body.status,
    )
    return GuaranteeResponse.model_validate(guarantee)
