# dawazon/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query

from dawazon.api.dependencies import get_cart_service
from dawazon.domain.schemas import CartOut
from dawazon.services.cart_service import CartService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=List[CartOut])
def list_orders(
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    """
    Historia zamowien uzytkownika, najnowsze pierwsze.
    """
    return [CartOut.model_validate(c) for c in svc.list_orders(user_id)]


@router.get("/{cart_id}", response_model=CartOut)
def get_order(
    cart_id: str,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    return CartOut.model_validate(svc.get_order(cart_id, user_id))
