# dawazon/repos/cart_repo.py
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, selectinload

from dawazon.data.models.cart import CartModel
from dawazon.data.models.cart_line import CartLineModel
from dawazon.domain.cart import Address, Cart, CartLine, Client, Status


class CartRepo:
    """
    Zapis i odczyt agregatu Cart.
    Repo nie commituje samo (poza tym co robi serwis) - commit/rollback wola serwis,
    zeby np. zamkniety koszyk i jego nastepca poszly w jednej transakcji.
    """

    def __init__(self, db: Session):
        self.db = db

    #query

    def get_cart(self, cart_id: str) -> Optional[Cart]:
        stmt = (
            select(CartModel)
            .where(CartModel.id == cart_id)
            .options(selectinload(CartModel.lines))
            .execution_options(populate_existing=True)
        )
        model = self.db.scalars(stmt).first()
        return _to_domain(model) if model else None

    def get_active_cart_by_user(self, user_id: int) -> Optional[Cart]:
        stmt = (
            select(CartModel)
            .where(CartModel.user_id == user_id, CartModel.purchased.is_(False))
            .options(selectinload(CartModel.lines))
            .execution_options(populate_existing=True)
        )
        model = self.db.scalars(stmt).first()
        return _to_domain(model) if model else None

    def list_carts(
        self,
        user_id: Optional[int] = None,
        purchased: Optional[bool] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Cart], int]:
        filters = []
        if user_id is not None:
            filters.append(CartModel.user_id == user_id)
        if purchased is not None:
            filters.append(CartModel.purchased.is_(purchased))

        total = self.db.scalar(select(func.count()).select_from(CartModel).where(*filters))

        stmt = (
            select(CartModel)
            .where(*filters)
            .order_by(CartModel.created_at.desc(), CartModel.id)
            .options(selectinload(CartModel.lines))
            .execution_options(populate_existing=True)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        carts = [_to_domain(m) for m in self.db.scalars(stmt)]
        return carts, total

    def list_checkouts_started_before(self, cutoff: datetime) -> List[Cart]:
        stmt = (
            select(CartModel)
            .where(
                CartModel.purchased.is_(False),
                CartModel.checkout_started_at.is_not(None),
                CartModel.checkout_started_at < cutoff,
            )
            .options(selectinload(CartModel.lines))
            .execution_options(populate_existing=True)
        )
        return [_to_domain(m) for m in self.db.scalars(stmt)]

    #commands

    def add_cart(self, cart: Cart) -> None:
        model = CartModel(id=cart.id, user_id=cart.user_id, version=cart.version, created_at=cart.created_at)
        for key, value in _cart_values(cart).items():
            setattr(model, key, value)
        model.lines = _line_models(cart)
        self.db.add(model)
        self.db.flush()

    def update_cart(self, cart: Cart) -> int:
        """
        Optimistic locking: UPDATE ... WHERE id = :id AND version = :version.
        Zwraca rowcount - 0 oznacza ze ktos inny zapisal koszyk w miedzyczasie.
        """
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart.id, CartModel.version == cart.version)
            .values(version=cart.version + 1, **_cart_values(cart))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return 0

        #linie zapisywane od nowa (kolejnosc, ilosci, statusy)
        self.db.execute(delete(CartLineModel).where(CartLineModel.cart_id == cart.id))
        self.db.add_all(
            CartLineModel(cart_id=cart.id, **values) for values in _line_values(cart)
        )
        self.db.flush()

        cart.version += 1
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    #sqlite gubi strefe czasowa
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _cart_values(cart: Cart) -> dict:
    client = cart.client
    address = client.address if client else None
    return {
        "purchased": cart.purchased,
        "client_name": client.name if client else None,
        "client_email": client.email if client else None,
        "client_phone": client.phone if client else None,
        "client_address_number": address.number if address else None,
        "client_address_street": address.street if address else None,
        "client_address_city": address.city if address else None,
        "client_address_province": address.province if address else None,
        "client_address_country": address.country if address else None,
        "client_address_postal_code": address.postal_code if address else None,
        "total_items": cart.total_items,
        "total": cart.total,
        "checkout_started_at": cart.checkout_started_at,
        "updated_at": cart.updated_at,
    }


def _line_values(cart: Cart) -> List[dict]:
    return [
        {
            "position": position,
            "product_id": line.product_id,
            "quantity": line.quantity,
            "product_price": line.product_price,
            "status": line.status.value,
            "total_price": line.total_price,
        }
        for position, line in enumerate(cart.cart_lines)
    ]


def _line_models(cart: Cart) -> List[CartLineModel]:
    return [CartLineModel(**values) for values in _line_values(cart)]


def _to_domain(model: CartModel) -> Cart:
    client = None
    if model.client_name is not None:
        address = None
        if model.client_address_street is not None:
            address = Address(
                number=model.client_address_number,
                street=model.client_address_street,
                city=model.client_address_city,
                province=model.client_address_province,
                country=model.client_address_country,
                postal_code=model.client_address_postal_code,
            )
        client = Client(
            name=model.client_name,
            email=model.client_email,
            phone=model.client_phone,
            address=address,
        )

    return Cart(
        id=model.id,
        user_id=model.user_id,
        purchased=model.purchased,
        client=client,
        cart_lines=[
            CartLine(
                product_id=line.product_id,
                quantity=line.quantity,
                product_price=line.product_price,
                status=Status(line.status),
            )
            for line in model.lines
        ],
        checkout_started_at=_aware(model.checkout_started_at),
        version=model.version,
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
    )
