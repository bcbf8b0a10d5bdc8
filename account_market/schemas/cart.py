"""Cart Schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CartAdd(BaseModel):
    listing_id: int = Field(gt=0)
    quantity: int = Field(1, ge=1, le=100)


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    buyer_id: int
    listing_id: int
    quantity: int
    added_at: datetime
