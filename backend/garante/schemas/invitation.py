"""Invitation and Edit-Eligibility Schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class InvitationCreate(BaseModel):
    user_id: UUID
    role: Literal["manager", "staff"] = "staff"


class InvitationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    business_id: UUID
    user_id: UUID
    role: str
    status: str
    expires_at: datetime
    responded_at: datetime | None
    created_at: datetime


class EditEligibilityResponse(BaseModel):
    """Whether profile/business details may be edited right now."""
    eligible: bool
    active_disputes: int
    reason: str | None = None
