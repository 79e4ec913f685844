# dawazon/api/routers/sales.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from dawazon.api.dependencies import get_sales_service
from dawazon.domain.schemas import (
    CartOut,
    CartPageOut,
    EarningsOut,
    SaleLineOut,
    SaleLinePageOut,
    StatusIn,
)
from dawazon.services.sales_service import SalesService
from dawazon.utils.settings import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/sales", tags=["sales"])


@router.get("", response_model=SaleLinePageOut)
def list_sale_lines(
    user_id: int = Query(..., description="ID admina albo managera"),
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, gt=0, le=100),
    svc: SalesService = Depends(get_sales_service),
):
    items, total = svc.list_sale_lines(user_id, page=page, size=size)
    return SaleLinePageOut(
        items=[SaleLineOut.model_validate(s) for s in items],
        page=page,
        size=size,
        total=total,
    )


@router.get("/earnings", response_model=EarningsOut)
def total_earnings(
    user_id: int = Query(...),
    svc: SalesService = Depends(get_sales_service),
):
    total, manager_id = svc.total_earnings(user_id)
    return EarningsOut(total=total, manager_id=manager_id)


@router.get("/carts", response_model=CartPageOut)
def list_carts(
    user_id: int = Query(...),
    owner_id: Optional[int] = Query(None),
    purchased: Optional[bool] = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, gt=0, le=100),
    svc: SalesService = Depends(get_sales_service),
):
    carts, total = svc.list_carts(user_id, user_id=owner_id, purchased=purchased, page=page, size=size)
    return CartPageOut(
        items=[CartOut.model_validate(c) for c in carts],
        page=page,
        size=size,
        total=total,
    )


@router.get("/{cart_id}/lines/{product_id}", response_model=SaleLineOut)
def get_sale_line(
    cart_id: str,
    product_id: str,
    user_id: int = Query(...),
    svc: SalesService = Depends(get_sales_service),
):
    return SaleLineOut.model_validate(svc.get_sale_line(user_id, cart_id, product_id))


@router.put("/{cart_id}/lines/{product_id}/status", response_model=SaleLineOut)
def update_line_status(
    cart_id: str,
    product_id: str,
    payload: StatusIn,
    user_id: int = Query(...),
    svc: SalesService = Depends(get_sales_service),
):
    line = svc.update_line_status(user_id, cart_id, product_id, payload.status)
    return SaleLineOut.model_validate(line)


@router.post("/{cart_id}/lines/{product_id}/cancel", response_model=SaleLineOut)
def cancel_sale(
    cart_id: str,
    product_id: str,
    user_id: int = Query(...),
    svc: SalesService = Depends(get_sales_service),
):
    """Anulowanie linii, towar wraca do katalogu. Ponowne anulowanie nic nie zmienia."""
    return SaleLineOut.model_validate(svc.cancel_sale(user_id, cart_id, product_id))
