# dawazon/api/dependencies.py
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from dawazon.data.database import get_db
from dawazon.services.cart_service import CartService
from dawazon.services.lock_service import LockService
from dawazon.services.notification_service import NotificationService
from dawazon.services.product_client import ProductClient
from dawazon.services.sales_service import SalesService


@lru_cache
def get_product_client() -> ProductClient:
    return ProductClient()


@lru_cache
def get_lock_service() -> LockService:
    return LockService()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_cart_service(
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> CartService:
    return CartService(
        db=db,
        product_client=product_client,
        lock_service=lock_service,
        notification_service=notification_service,
    )


def get_sales_service(
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
    cart_service: CartService = Depends(get_cart_service),
) -> SalesService:
    return SalesService(db=db, product_client=product_client, cart_service=cart_service)
