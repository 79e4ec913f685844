#dawazon/api/routers/carts.py
from fastapi import APIRouter, Depends, Query

from dawazon.api.dependencies import get_cart_service
from dawazon.domain.schemas import (
    CartOut,
    CheckoutIn,
    LineIn,
    QuantityIn,
)
from dawazon.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


#/me musi byc przed /{cart_id}
@router.get("/me", response_model=CartOut)
def get_active_cart(
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    """Aktywny koszyk uzytkownika, tworzony przy pierwszym dostepie."""
    return CartOut.model_validate(svc.get_active_cart(user_id))


@router.get("/{cart_id}", response_model=CartOut)
def get_cart(
    cart_id: str,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    return CartOut.model_validate(svc.get_cart(cart_id, user_id))


@router.post("/me/lines", response_model=CartOut)
def add_line(
    payload: LineIn,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.add_product(
        user_id=user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    return CartOut.model_validate(cart)


@router.put("/me/lines/{product_id}", response_model=CartOut)
def update_line(
    product_id: str,
    payload: QuantityIn,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    return CartOut.model_validate(svc.update_quantity(user_id, product_id, payload.quantity))


@router.delete("/me/lines/{product_id}", response_model=CartOut)
def remove_line(
    product_id: str,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    return CartOut.model_validate(svc.remove_product(user_id, product_id))


@router.delete("/me/lines", response_model=CartOut)
def clear_cart(
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    return CartOut.model_validate(svc.clear_cart(user_id))


@router.post("/me/checkout/start", response_model=CartOut)
def begin_checkout(
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    """Rezerwuje towar, koszyk jest zablokowany do zmian do konca checkoutu."""
    return CartOut.model_validate(svc.begin_checkout(user_id))


@router.delete("/me/checkout", response_model=CartOut)
def cancel_checkout(
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    return CartOut.model_validate(svc.cancel_checkout(user_id))


@router.post("/me/checkout", response_model=CartOut, status_code=201)
def checkout(
    payload: CheckoutIn | None = None,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    """
    Zamyka koszyk jako zamowienie (201).
    Bez danych klienta w body brany jest profil uzytkownika.
    """
    client = payload.client.to_domain() if payload and payload.client else None
    return CartOut.model_validate(svc.checkout(user_id, client))
