from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional
from uuid import uuid4

import requests
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dawazon.data.models.user import UserModel
from dawazon.domain.cart import Address, Cart, CartLine, Client, Role, Status, to_money, utcnow
from dawazon.domain.errors import (
    CartError,
    ConcurrencyConflict,
    Forbidden,
    InsufficientStock,
    InvalidArgument,
    NotFound,
)
from dawazon.repos.cart_repo import CartRepo
from dawazon.repos.user_repo import UserRepo
from dawazon.services.lock_service import LockService
from dawazon.services.notification_service import NotificationService
from dawazon.services.product_client import ProductClient
from dawazon.utils.settings import CART_LOCK_TTL_SECONDS, CHECKOUT_TIMEOUT_SECONDS
from dawazon.utils.logging import get_logger

logger = get_logger(__name__)


def client_from_user(user: UserModel) -> Optional[Client]:
    """Profil uzytkownika jako tymczasowy snapshot klienta aktywnego koszyka."""
    if not user.email:
        return None

    address = None
    if user.address_street:
        address = Address(
            number=user.address_number,
            street=user.address_street,
            city=user.address_city,
            province=user.address_province,
            country=user.address_country,
            postal_code=user.address_postal_code,
        )
    return Client(name=user.name, email=user.email, phone=user.phone, address=address)


class CartService:
    """
    Use case'y koszyka po stronie klienta sklepu.
    commands (add, remove, update, clear, checkout) modyfikuja stan:
    lock na koszyk w redisie + optimistic locking na polu version
    query (get, list) tylko odczyt
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
    ):
        self.repo = CartRepo(db)
        self.users = UserRepo(db)
        self.product_client = product_client
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    #query - odczyt

    def get_active_cart(self, user_id: int) -> Cart:
        user = self._require_shopper(user_id)

        cart = self.repo.get_active_cart_by_user(user_id)
        if cart:
            return cart

        return self._open_cart(user)

    def get_cart(self, cart_id: str, user_id: int) -> Cart:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            raise NotFound(f"Cart {cart_id} not found")

        if cart.user_id != user_id:
            raise Forbidden("Brak dostepu do koszyka")

        return cart

    def list_orders(self, user_id: int) -> List[Cart]:
        self._require_user(user_id)
        carts, _ = self.repo.list_carts(user_id=user_id, purchased=True)
        return carts

    def get_order(self, cart_id: str, user_id: int) -> Cart:
        cart = self.get_cart(cart_id, user_id)
        if not cart.purchased:
            raise NotFound(f"Order {cart_id} not found")
        return cart

    def get_cart_by_id(self, cart_id: str) -> Cart:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            raise NotFound(f"Cart {cart_id} not found")
        return cart

    #commands

    def add_product(self, user_id: int, product_id: str, quantity: int = 1) -> Cart:
        # Walidacje
        if quantity <= 0:
            raise InvalidArgument("Ilosc musi byc wieksza niz 0")

        cart = self.get_active_cart(user_id)

        logger.info("Fetching product from catalog", product_id=product_id)
        product = self.product_client.fetch_product(product_id)
        price = to_money(product["price"])

        def change(c: Cart):
            line = c.find_line(product_id)
            wanted = quantity + (line.quantity if line else 0)
            self._check_stock(product, wanted)
            c.add_line(product_id, quantity, price)

        cart = self._apply(cart, change)
        logger.info("Product added to cart", cart_id=cart.id, product_id=product_id, quantity=quantity, version=cart.version)
        return cart

    def update_quantity(self, user_id: int, product_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            raise InvalidArgument("Ilosc musi byc wieksza niz 0")

        cart = self.get_active_cart(user_id)
        cart.get_line(product_id)

        product = self.product_client.fetch_product(product_id)

        def change(c: Cart):
            self._check_stock(product, quantity)
            c.update_quantity(product_id, quantity)

        cart = self._apply(cart, change)
        logger.info("Cart line quantity updated", cart_id=cart.id, product_id=product_id, quantity=quantity)
        return cart

    def remove_product(self, user_id: int, product_id: str) -> Cart:
        cart = self.get_active_cart(user_id)

        def change(c: Cart):
            c.remove_line(product_id)

        cart = self._apply(cart, change)
        logger.info("Product removed from cart", cart_id=cart.id, product_id=product_id, version=cart.version)
        return cart

    def clear_cart(self, user_id: int) -> Cart:
        cart = self.get_active_cart(user_id)
        cart = self._apply(cart, lambda c: c.clear())
        logger.info("Cart emptied", cart_id=cart.id)
        return cart

    def begin_checkout(self, user_id: int) -> Cart:
        """
        Pierwsza faza checkoutu: rezerwacja towaru w katalogu.
        Tu bylaby otwierana sesja platnosci.
        """
        cart = self.get_active_cart(user_id)

        def change(c: Cart):
            c.begin_checkout()
            self._reserve_stock(c)

        cart = self._apply(cart, change, compensate=self._release_stock)
        logger.info("Checkout started", cart_id=cart.id, total=str(cart.total))
        return cart

    def cancel_checkout(self, user_id: int) -> Cart:
        cart = self.get_active_cart(user_id)
        cart = self._apply(cart, lambda c: c.abort_checkout())
        self._release_stock(cart)
        logger.info("Checkout cancelled", cart_id=cart.id)
        return cart

    def checkout(self, user_id: int, client: Optional[Client] = None) -> Cart:
        """
        Zamyka aktywny koszyk jako zamowienie.
        Zamkniety koszyk i nowy pusty koszyk ida w jednej transakcji,
        potem asynchronicznie mail z potwierdzeniem.
        """
        cart = self.get_active_cart(user_id)
        reserve = not cart.checkout_in_progress

        def change(c: Cart):
            successor = c.checkout(client)
            if reserve:
                self._reserve_stock(c)
            return [successor]

        cart = self._apply(cart, change, compensate=self._release_stock if reserve else None)
        logger.info("Cart checked out", cart_id=cart.id, user_id=user_id, total=str(cart.total), items=cart.total_items)

        self.notification_service.send_order_confirmation(cart.id)
        return cart

    def transition_line_status(self, cart_id: str, product_id: str, new_status) -> CartLine:
        """Zmiana statusu linii zamowienia. Anulowanie zwraca towar do katalogu."""
        cart = self.get_cart_by_id(cart_id)
        changed: List[CartLine] = []

        def change(c: Cart):
            changed.append(c.transition_line_status(product_id, new_status))

        self._apply(cart, change)
        line = changed[0]
        logger.info("Line status changed", cart_id=cart_id, product_id=product_id, status=line.status.value)

        if line.status is Status.CANCELADO:
            self._return_stock(line)
        return line

    def expire_stale_checkouts(self, timeout_seconds: int = CHECKOUT_TIMEOUT_SECONDS, now: datetime | None = None) -> int:
        cutoff = (now or utcnow()) - timedelta(seconds=timeout_seconds)
        carts = self.repo.list_checkouts_started_before(cutoff)
        logger.info("Found stale checkouts", count=len(carts), cutoff=cutoff.isoformat())

        expired = 0
        for cart in carts:
            try:
                self._apply(cart, lambda c: c.abort_checkout())
                self._release_stock(cart)
                expired += 1
            except (CartError, requests.RequestException) as e:
                logger.error("Failed to expire checkout", cart_id=cart.id, error=str(e))
        return expired

    #helpers

    def _apply(
        self,
        cart: Cart,
        change: Callable[[Cart], Optional[Iterable[Cart]]],
        compensate: Callable[[Cart], None] | None = None,
    ) -> Cart:
        """
        Wykonuje zmiane na koszyku pod lockiem i zapisuje z kontrola wersji.
        change moze zwrocic nowe koszyki do zapisania w tej samej transakcji.
        compensate jest wolane gdy zmiana juz wyszla poza baze (np. stock)
        a zapis sie nie udal, niezaleznie od powodu.
        """
        owner = uuid4().hex
        if not self.lock_service.acquire_cart_lock(cart.id, owner, ttl=CART_LOCK_TTL_SECONDS):
            raise ConcurrencyConflict(f"Cart {cart.id} is locked by another operation")

        try:
            created = change(cart) or ()
            try:
                self._save(cart, *created)
            except Exception:
                self.repo.rollback()
                if compensate:
                    logger.warning("Save failed, compensating", cart_id=cart.id)
                    compensate(cart)
                raise
        finally:
            self.lock_service.release_cart_lock(cart.id, owner)

        return cart

    def _save(self, cart: Cart, *created: Cart) -> None:
        rowcount = self.repo.update_cart(cart)

        # Optimistic locking warunek na wersje
        # np w bazie update set version 2 where id 'abc' and version 1
        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflict(
                f"Cart {cart.id} was modified by another operation"
            )

        try:
            for new_cart in created:
                self.repo.add_cart(new_cart)
            self.repo.commit()
        except IntegrityError as e:
            #drugi aktywny koszyk tego samego usera
            self.repo.rollback()
            raise ConcurrencyConflict(f"Cart {cart.id} could not be saved: {e.orig}") from e

    def _open_cart(self, user: UserModel) -> Cart:
        cart = Cart.create(user.id, client=client_from_user(user))
        try:
            self.repo.add_cart(cart)
            self.repo.commit()
        except IntegrityError:
            #rownolegle zapytanie zdazylo zalozyc koszyk
            self.repo.rollback()
            existing = self.repo.get_active_cart_by_user(user.id)
            if existing is None:
                raise
            return existing

        logger.info("Opened active cart", cart_id=cart.id, user_id=user.id)
        return cart

    def _require_user(self, user_id: int) -> UserModel:
        user = self.users.get_user(user_id)
        if not user:
            raise NotFound(f"User {user_id} not found")
        return user

    def _require_shopper(self, user_id: int) -> UserModel:
        user = self._require_user(user_id)
        if user.role != Role.USER.value:
            raise Forbidden(f"Users with role {user.role} do not own carts")
        return user

    @staticmethod
    def _check_stock(product: dict, quantity: int) -> None:
        stock = product.get("stock")
        if stock is not None and quantity > stock:
            raise InsufficientStock(product["id"], quantity, stock)

    def _reserve_stock(self, cart: Cart) -> None:
        reserved: List[CartLine] = []
        try:
            for line in cart.cart_lines:
                self.product_client.adjust_stock(line.product_id, -line.quantity)
                reserved.append(line)
        except (CartError, requests.RequestException):
            #oddaj to co zdazylismy zarezerwowac
            for line in reserved:
                self._return_stock(line)
            raise

    def _release_stock(self, cart: Cart) -> None:
        for line in cart.cart_lines:
            self._return_stock(line)

    def _return_stock(self, line: CartLine) -> None:
        try:
            self.product_client.adjust_stock(line.product_id, line.quantity)
        except (CartError, requests.RequestException) as e:
            logger.error("Failed to return stock", product_id=line.product_id, quantity=line.quantity, error=str(e))
