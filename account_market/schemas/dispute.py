"""Dispute Schemas.

Invariants:
    - partial_refund requires refund_amount; other resolutions ignore it
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DisputeCreate(BaseModel):
    transaction_id: int = Field(gt=0)
    reason: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=5000)


class DisputeResolve(BaseModel):
    resolution: Literal["buyer_favor", "seller_favor", "partial_refund"]
    admin_notes: str = Field(min_length=1, max_length=2000)
    refund_amount: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def refund_required_for_partial(self):
        if self.resolution == "partial_refund" and self.refund_amount is None:
            raise ValueError("refund_amount is required for partial_refund")
        return self


class DisputeNote(BaseModel):
    admin_notes: str | None = Field(None, max_length=2000)


class DisputeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_id: int
    buyer_id: int
    seller_id: int
    reason: str
    description: str
    status: str
    resolution: str | None = None
    refund_amount: float | None = None
    admin_notes: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime
