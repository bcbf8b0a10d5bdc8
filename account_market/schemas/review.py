"""Review Schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    transaction_id: int = Field(gt=0)
    rating: int = Field(ge=1, le=5, strict=True)
    comment: str | None = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_id: int
    buyer_id: int
    seller_id: int
    rating: int
    comment: str | None = None
    created_at: datetime

