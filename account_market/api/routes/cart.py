"""Cart Routes — the caller's own cart only."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.api.dependencies import get_current_user_id
from account_market.core.errors import ResourceNotFoundError
from account_market.infrastructure.database import get_db
from account_market.schemas.cart import CartAdd, CartItemResponse
from account_market.services.cart import CartService

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


@router.post(
    "", response_model=CartItemResponse, status_code=status.HTTP_201_CREATED,
)
async def add_to_cart(
    body: CartAdd,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await CartService(db).add_to_cart(user_id, body.listing_id, body.quantity)


@router.get("", response_model=list[CartItemResponse])
async def get_cart(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await CartService(db).get_cart(user_id)


@router.delete("/{cart_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_cart(
    cart_item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if not await CartService(db).remove_from_cart(cart_item_id, user_id):
        raise ResourceNotFoundError("CartItem", cart_item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
