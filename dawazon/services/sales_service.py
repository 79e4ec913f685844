# dawazon/services/sales_service.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

import requests
from sqlalchemy.orm import Session

from dawazon.data.models.user import UserModel
from dawazon.domain.cart import Cart, CartLine, Client, Role, Status, to_money
from dawazon.domain.errors import CartError, Forbidden, NotFound
from dawazon.repos.cart_repo import CartRepo
from dawazon.repos.user_repo import UserRepo
from dawazon.services.cart_service import CartService
from dawazon.services.product_client import ProductClient
from dawazon.utils.settings import DEFAULT_PAGE_SIZE
from dawazon.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SaleLine:
    """Linia zamowienia z danymi produktu z katalogu."""

    sale_id: str
    product_id: str
    product_name: str
    quantity: int
    product_price: Decimal
    total_price: Decimal
    status: Status
    manager_id: Optional[int]
    user_id: int
    client: Optional[Client]
    created_at: datetime
    updated_at: datetime


class SalesService:
    """
    Zaplecze sprzedazy dla ADMIN i MANAGER.
    ADMIN widzi wszystko, MANAGER tylko linie swoich produktow (creator_id).
    Zmiany statusow ida przez CartService (lock + wersja).
    """

    def __init__(self, db: Session, product_client: ProductClient, cart_service: CartService):
        self.repo = CartRepo(db)
        self.users = UserRepo(db)
        self.product_client = product_client
        self.cart_service = cart_service

    #query

    def list_sale_lines(self, actor_id: int, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> Tuple[List[SaleLine], int]:
        actor = self._require_staff(actor_id)
        manager_id = None if actor.role == Role.ADMIN.value else actor.id

        sale_lines = self._collect_sale_lines(manager_id)
        start = page * size
        return sale_lines[start:start + size], len(sale_lines)

    def get_sale_line(self, actor_id: int, cart_id: str, product_id: str) -> SaleLine:
        actor = self._require_staff(actor_id)
        cart = self._get_purchased_cart(cart_id)
        line = cart.get_line(product_id)

        product = self.product_client.fetch_product(product_id)
        self._assert_can_manage(actor, product)
        return _to_sale_line(cart, line, product)

    def total_earnings(self, actor_id: int) -> Tuple[Decimal, Optional[int]]:
        """Suma linii zamowien bez anulowanych."""
        actor = self._require_staff(actor_id)
        manager_id = None if actor.role == Role.ADMIN.value else actor.id

        total = sum(
            (s.total_price for s in self._collect_sale_lines(manager_id) if s.status is not Status.CANCELADO),
            Decimal("0"),
        )
        return to_money(total), manager_id

    def list_carts(
        self,
        actor_id: int,
        user_id: Optional[int] = None,
        purchased: Optional[bool] = None,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Tuple[List[Cart], int]:
        actor = self._require_staff(actor_id)
        if actor.role != Role.ADMIN.value:
            raise Forbidden("Only administrators can list carts")

        return self.repo.list_carts(user_id=user_id, purchased=purchased, offset=page * size, limit=size)

    #commands

    def update_line_status(self, actor_id: int, cart_id: str, product_id: str, new_status) -> SaleLine:
        actor = self._require_staff(actor_id)
        cart = self._get_purchased_cart(cart_id)
        cart.get_line(product_id)

        product = self.product_client.fetch_product(product_id)
        self._assert_can_manage(actor, product)

        self.cart_service.transition_line_status(cart_id, product_id, new_status)

        cart = self._get_purchased_cart(cart_id)
        return _to_sale_line(cart, cart.get_line(product_id), product)

    def cancel_sale(self, actor_id: int, cart_id: str, product_id: str) -> SaleLine:
        """
        Anulowanie linii sprzedazy, towar wraca do katalogu.
        Juz anulowana linia - nic sie nie dzieje.
        """
        actor = self._require_staff(actor_id)
        cart = self._get_purchased_cart(cart_id)
        line = cart.get_line(product_id)

        product = self.product_client.fetch_product(product_id)
        self._assert_can_manage(actor, product)

        if line.status is Status.CANCELADO:
            logger.info("Sale line already cancelled", cart_id=cart_id, product_id=product_id)
            return _to_sale_line(cart, line, product)

        self.cart_service.transition_line_status(cart_id, product_id, Status.CANCELADO)
        logger.info("Sale line cancelled", cart_id=cart_id, product_id=product_id, actor_id=actor_id)

        cart = self._get_purchased_cart(cart_id)
        return _to_sale_line(cart, cart.get_line(product_id), product)

    #helpers

    def _collect_sale_lines(self, manager_id: Optional[int]) -> List[SaleLine]:
        carts, _ = self.repo.list_carts(purchased=True)

        products: dict = {}
        sale_lines: List[SaleLine] = []
        for cart in carts:
            for line in cart.cart_lines:
                try:
                    if line.product_id not in products:
                        products[line.product_id] = self.product_client.fetch_product(line.product_id)
                    product = products[line.product_id]
                except (CartError, requests.RequestException) as e:
                    #linia bez produktu w katalogu jest pomijana, reszta raportu dalej
                    logger.warning("Skipping sale line", cart_id=cart.id, product_id=line.product_id, error=str(e))
                    continue

                if manager_id is not None and product.get("creator_id") != manager_id:
                    continue
                sale_lines.append(_to_sale_line(cart, line, product))

        #nowsze zamowienia pierwsze
        sale_lines.sort(key=lambda s: s.created_at, reverse=True)
        return sale_lines

    def _get_purchased_cart(self, cart_id: str) -> Cart:
        cart = self.repo.get_cart(cart_id)
        if not cart or not cart.purchased:
            raise NotFound(f"Sale {cart_id} not found")
        return cart

    def _require_staff(self, actor_id: int) -> UserModel:
        actor = self.users.get_user(actor_id)
        if not actor:
            raise NotFound(f"User {actor_id} not found")
        if actor.role not in (Role.ADMIN.value, Role.MANAGER.value):
            raise Forbidden("Only administrators and managers can manage sales")
        return actor

    @staticmethod
    def _assert_can_manage(actor: UserModel, product: dict) -> None:
        if actor.role == Role.ADMIN.value:
            return
        if product.get("creator_id") != actor.id:
            raise Forbidden("Managers can only manage sales of their own products")


def _to_sale_line(cart: Cart, line: CartLine, product: dict) -> SaleLine:
    return SaleLine(
        sale_id=cart.id,
        product_id=line.product_id,
        product_name=product.get("name", line.product_id),
        quantity=line.quantity,
        product_price=line.product_price,
        total_price=line.total_price,
        status=line.status,
        manager_id=product.get("creator_id"),
        user_id=cart.user_id,
        client=cart.client,
        created_at=cart.created_at,
        updated_at=cart.updated_at,
    )
