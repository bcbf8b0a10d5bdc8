"""Withdrawal Schemas — payment_details are write-only."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class WithdrawalCreate(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    payment_method: str = Field(min_length=1, max_length=50)
    payment_details: str = Field(min_length=1, max_length=2000)


class WithdrawalProcess(BaseModel):
    status: Literal["approved", "rejected", "completed"]
    admin_notes: str | None = Field(None, max_length=2000)


class WithdrawalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    seller_id: int
    amount: float
    payment_method: str
    status: str
    admin_notes: str | None = None
    processed_at: datetime | None = None
    created_at: datetime
