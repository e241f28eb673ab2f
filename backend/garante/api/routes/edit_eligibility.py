"""Edit Eligibility Routes - detail-mutation lock for the external profile/business layer.

Invariants:
    - Wrong actor fails UNAUTHORIZED; an unresolved dispute answers eligible=false
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from garante.api.dependencies import get_caller
from garante.core.access_guard import Caller
from garante.core.errors import GaranteError, UnauthorizedError
from garante.infrastructure.database import get_db
from garante.schemas.invitation import EditEligibilityResponse
from garante.services.edit_lock_service import EditLockService

router = APIRouter(prefix="/api/v1", tags=["edit-eligibility"])


def _to_response(
    error: GaranteError | None, active: int,
) -> EditEligibilityResponse:
    if isinstance(error, UnauthorizedError):
        raise error
    return EditEligibilityResponse(
        eligible=error is None,
        active_disputes=active,
        reason=error.message if error else None,
    )


@router.get("/users/{user_id}/edit-eligibility", response_model=EditEligibilityResponse)
async def profile_edit_eligibility(
    user_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    error, active = await EditLockService(db).profile_eligibility(caller, user_id)
    return _to_response(error, active)


@router.get(
    "/businesses/{business_id}/edit-eligibility",
    response_model=EditEligibilityResponse,
)
async def business_edit_eligibility(
    business_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    error, active = await EditLockService(db).business_eligibility(caller, business_id)
    return _to_response(error, active)
