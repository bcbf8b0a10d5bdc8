"""Transaction Schemas — checkout request, transaction view, credential delivery.

Invariants:
    - CheckoutRequest.cart_item_ids: at least one id, no duplicates
    - amount and platform_fee serialize as numbers (100.0, not "100.00")
    - escrow_released is advisory, computed at serialization time
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from account_market.core.domain_types import PaymentMethod
from account_market.core.enforce_disputes import escrow_released


class CheckoutRequest(BaseModel):
    payment_method: PaymentMethod
    cart_item_ids: list[int] = Field(min_length=1, max_length=100)

    @field_validator("cart_item_ids")
    @classmethod
    def dedupe_ids(cls, v: list[int]) -> list[int]:
        return list(dict.fromkeys(v))


class TransactionItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    listing_id: int
    quantity: int
    unit_price: float


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    buyer_id: int
    seller_id: int
    listing_id: int
    amount: float
    platform_fee: float
    payment_method: str
    status: str
    escrow_release_date: datetime | None = None
    escrow_released: bool = False
    credentials_delivered_at: datetime | None = None
    created_at: datetime
    items: list[TransactionItemResponse] = []

    @model_validator(mode="after")
    def mark_escrow_released(self):
        self.escrow_released = escrow_released(
            self.escrow_release_date, datetime.now(timezone.utc),
        )
        return self


class CredentialsResponse(BaseModel):
    transaction_id: int
    credentials: str
