"""Restitution Schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RestitutionProcess(BaseModel):
    """Seller's payment attestation - free text or a document reference."""
    proof_of_payment: str = Field(min_length=1, max_length=2000)

    @field_validator("proof_of_payment")
    @classmethod
    def strip_proof(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("proof_of_payment cannot be empty or whitespace")
        return v


class RestitutionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    verdict_id: UUID
    amount: Decimal
    status: str
    proof_of_payment: str | None
    processed_at: datetime | None
    completed_at: datetime | None
    completed_by: UUID | None
    created_at: datetime
