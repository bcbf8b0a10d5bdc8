"""Listing Schemas — create/update/moderate payloads and the public listing view.

Invariants:
    - price > 0 with at most two decimals
    - ListingResponse never carries credentials (encoded or decoded)
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from account_market.core.domain_types import Platform


class ListingCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    platform: Platform
    category: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    credentials: str = Field(min_length=1, max_length=5000)
    follower_count: int | None = Field(None, ge=0)
    account_age_months: int | None = Field(None, ge=0)

    @field_validator("title", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class ListingUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=10, max_length=2000)
    category: str | None = Field(None, min_length=1, max_length=100)
    price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    follower_count: int | None = Field(None, ge=0)
    account_age_months: int | None = Field(None, ge=0)


class ListingModerate(BaseModel):
    status: Literal["active", "removed"]
    admin_notes: str | None = Field(None, max_length=2000)


class ListingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    seller_id: int
    title: str
    description: str
    platform: str
    category: str
    price: float
    follower_count: int | None = None
    account_age_months: int | None = None
    status: str
    created_at: datetime
