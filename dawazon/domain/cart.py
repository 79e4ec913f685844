# dawazon/domain/cart.py
"""
Agregat koszyka.

Koszyk zyje w dwoch fazach:
- aktywny (purchased=False) - jedyny mutowalny koszyk uzytkownika
- historyczny (purchased=True) - zamrozony zapis zamowienia, zmienia sie
  tylko status poszczegolnych linii

Wszystkie niezmienniki (sumy, maszyna stanow linii, zamrozenie) pilnowane sa
tutaj, serwisy tylko laduja, wolaja metody i zapisuja.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from dawazon.domain.errors import InvalidArgument, InvalidState, InvalidTransition, NotFound

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    #float przez str zeby 0.1 nie zamienilo sie w 0.1000000000000000055511
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation:
            raise InvalidArgument(f"Not a monetary amount: {value!r}") from None
    if not value.is_finite():
        raise InvalidArgument(f"Not a monetary amount: {value!r}")
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"


class Status(str, Enum):
    EN_CARRITO = "EN_CARRITO"
    PREPARADO = "PREPARADO"
    ENVIADO = "ENVIADO"
    RECIBIDO = "RECIBIDO"
    CANCELADO = "CANCELADO"

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self]

    def can_transition_to(self, target: "Status") -> bool:
        return target in _VALID_TRANSITIONS[self]


_VALID_TRANSITIONS = {
    Status.EN_CARRITO: {Status.PREPARADO, Status.CANCELADO},
    Status.PREPARADO: {Status.ENVIADO, Status.CANCELADO},
    Status.ENVIADO: {Status.RECIBIDO, Status.CANCELADO},
    Status.RECIBIDO: set(),
    Status.CANCELADO: set(),
}


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    country: str
    postal_code: str
    number: Optional[int] = None
    province: Optional[str] = None


@dataclass(frozen=True)
class Client:
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[Address] = None


@dataclass
class CartLine:
    product_id: str
    quantity: int
    product_price: Decimal
    status: Status = Status.EN_CARRITO
    total_price: Decimal = field(init=False)

    def __post_init__(self):
        self.product_price = to_money(self.product_price)
        self.status = Status(self.status)
        self.total_price = to_money(self.product_price * self.quantity)

    def set_quantity(self, quantity: int) -> None:
        self.quantity = quantity
        self.total_price = to_money(self.product_price * quantity)


@dataclass
class Cart:
    user_id: int
    id: str = field(default_factory=lambda: uuid4().hex)
    purchased: bool = False
    client: Optional[Client] = None
    cart_lines: List[CartLine] = field(default_factory=list)
    total_items: int = 0
    total: Decimal = Decimal("0.00")
    checkout_started_at: Optional[datetime] = None
    version: int = 1
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at
        self._recalculate()

    @classmethod
    def create(cls, user_id: int, client: Optional[Client] = None) -> "Cart":
        return cls(user_id=user_id, client=client)

    @property
    def checkout_in_progress(self) -> bool:
        return self.checkout_started_at is not None

    @property
    def is_empty(self) -> bool:
        return not self.cart_lines

    def find_line(self, product_id: str) -> Optional[CartLine]:
        for line in self.cart_lines:
            if line.product_id == product_id:
                return line
        return None

    def get_line(self, product_id: str) -> CartLine:
        line = self.find_line(product_id)
        if line is None:
            raise NotFound(f"Product {product_id} is not in cart {self.id}")
        return line

    #commands na aktywnym koszyku

    def add_line(self, product_id: str, quantity: int, unit_price) -> CartLine:
        self._assert_mutable()
        _assert_positive(quantity)
        unit_price = to_money(unit_price)
        if unit_price < 0:
            raise InvalidArgument(f"Unit price must not be negative, got {unit_price}")

        line = self.find_line(product_id)
        if line:
            #cena zostaje z pierwszego dodania (snapshot)
            line.set_quantity(line.quantity + quantity)
        else:
            line = CartLine(product_id=product_id, quantity=quantity, product_price=unit_price)
            self.cart_lines.append(line)

        self._recalculate()
        self._touch()
        return line

    def remove_line(self, product_id: str) -> CartLine:
        self._assert_mutable()
        line = self.get_line(product_id)
        self.cart_lines.remove(line)
        self._recalculate()
        self._touch()
        return line

    def update_quantity(self, product_id: str, new_quantity: int) -> CartLine:
        self._assert_mutable()
        _assert_positive(new_quantity)
        line = self.get_line(product_id)
        line.set_quantity(new_quantity)
        self._recalculate()
        self._touch()
        return line

    def clear(self) -> None:
        self._assert_mutable()
        self.cart_lines = []
        self._recalculate()
        self._touch()

    def begin_checkout(self, now: Optional[datetime] = None) -> None:
        self._assert_mutable()
        if self.is_empty:
            raise InvalidState(f"Cart {self.id} is empty")
        self.checkout_started_at = now or utcnow()
        self._touch()

    def abort_checkout(self) -> None:
        if self.purchased:
            raise InvalidState(f"Cart {self.id} is already purchased")
        if not self.checkout_in_progress:
            raise InvalidState(f"Cart {self.id} has no checkout in progress")
        self.checkout_started_at = None
        self._touch()

    def checkout(self, client: Optional[Client] = None) -> "Cart":
        """
        Zamyka koszyk jako zamowienie i zwraca nowy pusty koszyk aktywny
        dla tego samego uzytkownika. Oba musza byc zapisane w jednej transakcji.
        """
        if self.purchased:
            raise InvalidState(f"Cart {self.id} is already purchased")
        if self.is_empty:
            raise InvalidState(f"Cart {self.id} is empty")

        snapshot = client or self.client
        if snapshot is None:
            raise InvalidArgument("Client details are required to check out")

        self.client = snapshot
        self.purchased = True
        self.checkout_started_at = None
        self._touch()

        return Cart.create(self.user_id, client=snapshot)

    #commands na historycznym koszyku

    def transition_line_status(self, product_id: str, new_status) -> CartLine:
        try:
            new_status = Status(new_status)
        except ValueError:
            raise InvalidArgument(f"Unknown status {new_status!r}") from None

        if not self.purchased:
            raise InvalidState(f"Cart {self.id} is not purchased yet")

        line = self.get_line(product_id)
        if not line.status.can_transition_to(new_status):
            raise InvalidTransition(line.status, new_status)

        line.status = new_status
        self._touch()
        return line

    def _assert_mutable(self) -> None:
        if self.purchased:
            raise InvalidState(f"Cart {self.id} is already purchased")
        if self.checkout_in_progress:
            raise InvalidState(f"Cart {self.id} has a checkout in progress")

    def _recalculate(self) -> None:
        self.total_items = sum(line.quantity for line in self.cart_lines)
        self.total = to_money(sum((line.total_price for line in self.cart_lines), Decimal("0")))

    def _touch(self) -> None:
        now = utcnow()
        #zegar moze stac w miejscu (albo cofnac sie) - updated_at zawsze rosnie
        if self.updated_at is not None and now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now


def _assert_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidArgument(f"Quantity must be a positive integer, got {quantity!r}")
