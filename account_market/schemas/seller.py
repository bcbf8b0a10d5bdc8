"""Seller Schemas — public balance and rating summaries."""

from pydantic import BaseModel


class BalanceResponse(BaseModel):
    user_id: int
    balance: float


class SellerRatingResponse(BaseModel):
    seller_id: int
    count: int
    average: float | None = None
