"""Dispute Schemas - open, defense and resolve payloads plus verdict responses.

Invariants:
    - reason at most 255 chars; description and notes non-empty
    - refund_amount is checked only for partial_refund: > 0 here, <= price in core
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from garante.schemas.restitution import RestitutionResponse


class DisputeCreate(BaseModel):
    guarantee_id: UUID
    reason: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=10_000)
    evidence: dict[str, Any]


class DefenseCreate(BaseModel):
    defense: dict[str, Any]
    defense_description: str = Field(min_length=1, max_length=10_000)


class ResolveRequest(BaseModel):
    """Arbitrator verdict - refund_amount only meaningful for partial_refund."""
    decision: Literal["refund", "partial_refund", "no_refund"]
    notes: str = Field(min_length=1, max_length=10_000)
    refund_amount: Decimal | None = Field(None, max_digits=12, decimal_places=2)

    @model_validator(mode="after")
    def validate_refund_amount(self):
        if self.decision != "partial_refund":
            return self
        if self.refund_amount is None:
            raise ValueError("partial_refund decision requires refund_amount")
        if self.refund_amount <= 0:
            raise ValueError("refund_amount must be greater than 0")
        return self


class DisputeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    guarantee_id: UUID
    initiated_by: UUID
    reason: str
    description: str
    evidence: dict[str, Any]
    defense: dict[str, Any] | None
    defense_description: str | None
    status: str
    resolution_notes: str | None
    resolved_by: UUID | None
    resolved_at: datetime | None
    created_at: datetime


class VerdictResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    dispute_id: UUID
    guarantee_id: UUID
    arbitrator_id: UUID
    winner_id: UUID
    decision: str
    refund_amount: Decimal | None
    notes: str
    evidence_reviewed: dict[str, Any]
    decided_at: datetime


class ResolveResponse(BaseModel):
    dispute: DisputeResponse
    verdict: VerdictResponse
    restitution: RestitutionResponse | None


class DisputeDetailResponse(BaseModel):
    dispute: DisputeResponse
    verdict: VerdictResponse | None
    restitution: RestitutionResponse | None


class DisputeListResponse(BaseModel):
    disputes: list[DisputeResponse]
    pagination: dict[str, int]
