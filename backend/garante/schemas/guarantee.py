"""Guarantee Schemas - request validation and response shapes for /guarantees.

Invariants:
    - price non-negative with at most 2 decimal places
    - status updates restricted to completed / cancelled / disputed
    - service_description stripped, non-empty

Design Decisions:
    - Literal for status over the str enum: Pydantic validates it natively and the
      400 envelope names the allowed values
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from garante.schemas.dispute import DisputeResponse


class GuaranteeCreate(BaseModel):
    """Guarantee creation - the caller becomes the seller."""
    business_id: UUID
    buyer_id: UUID
    service_description: str = Field(min_length=1, max_length=10_000)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    terms: dict[str, Any] = Field(default_factory=dict)
    expires_at: datetime | None = None

    @field_validator("service_description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("service_description cannot be empty or whitespace")
        return v


class GuaranteeStatusUpdate(BaseModel):
    status: Literal["completed", "cancelled", "disputed"]


class GuaranteeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    seller_id: UUID
    buyer_id: UUID
    business_id: UUID
    service_description: str
    price: Decimal
    terms: dict[str, Any]
    status: str
    seller_consent: bool
    buyer_consent: bool
    expires_at: datetime | None
    accepted_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime


class GuaranteeDetailResponse(GuaranteeResponse):
    """Guarantee with its full dispute history."""
    disputes: list[DisputeResponse] = Field(default_factory=list)


class GuaranteeListResponse(BaseModel):
    guarantees: list[GuaranteeResponse]
    pagination: dict[str, int]
