# dawazon/data/seed.py
from datetime import timedelta

from dawazon.data.database import SessionLocal, init_db
from dawazon.data.models.cart import CartModel
from dawazon.data.models.user import UserModel
from dawazon.domain.cart import Address, Cart, CartLine, Client, Role, Status, utcnow
from dawazon.repos.cart_repo import CartRepo
from dawazon.repos.user_repo import UserRepo
from dawazon.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

#(id, imie, email, rola, telefon, (numer, ulica, miasto, prowincja, kraj, kod))
USERS = [
    (1, "Admin", "admin@dawazon.es", Role.ADMIN, None, None),
    (2, "Manager", "manager@dawazon.es", Role.MANAGER, None, None),
    (3, "John Doe", "john.doe@email.com", Role.USER, "+34666333444",
     (42, "Gran Vía", "Madrid", "Madrid", "España", "28013")),
    (4, "Jane Smith", "jane.smith@email.com", Role.USER, "+34666555666",
     (15, "Paseo de Gracia", "Barcelona", "Barcelona", "España", "08007")),
    (5, "Carlos Ruiz", "carlos.ruiz@email.com", Role.USER, "+34666777888",
     (8, "Calle Larios", "Málaga", "Málaga", "España", "29015")),
    (6, "María García", "maria.garcia@email.com", Role.USER, "+34666999000",
     (23, "Calle Sierpes", "Sevilla", "Sevilla", "España", "41004")),
    (7, "Pedro López", "pedro.lopez@email.com", Role.USER, "+34666000111",
     (50, "Calle Mayor", "Valencia", "Valencia", "España", "46001")),
]

#user_id -> linie aktywnego koszyka (ilosc, produkt, cena)
ACTIVE_CARTS = {
    3: [(1, "Hx9Lp2Ks4TnB", "699.99"), (2, "Fp2Jk7Xm4YzT", "29.99")],
    4: [(1, "Yw3Zq7Vm1RfG", "1099.99"), (1, "Qs1Zw8Ty3NlJ", "59.99")],
    5: [(1, "Mx7Pk2Vn5RbD", "599.99")],
    6: [(1, "Ln8Cv5Dt1WpR", "89.99"), (2, "Jt3Lw6Fh9CmY", "34.99")],
    7: [],
}

#user_id -> (status, dni od utworzenia, dni od zmiany, linie)
ORDERS = {
    3: (Status.RECIBIDO, 45, 35, [(2, "Dk5Mn8Pj2WcX", "19.99"), (1, "Gn7Qs4Lv8BxZ", "22.99")]),
    4: (Status.CANCELADO, 15, 10, [(1, "Vb4Gx9Hs6MqK", "449.99")]),
    5: (Status.ENVIADO, 7, 5, [(3, "Rt6Bv9Nh3QsL", "15.99"), (2, "Fp2Jk7Xm4YzT", "29.99")]),
    6: (Status.RECIBIDO, 30, 20, [(1, "Vb4Gx9Hs6MqK", "449.99")]),
    7: (Status.PREPARADO, 2, 1, [(1, "Tx5Wr9Km2NhP", "1199.99")]),
}


def _client(user: UserModel) -> Client:
    return Client(
        name=user.name,
        email=user.email,
        phone=user.phone,
        address=Address(
            number=user.address_number,
            street=user.address_street,
            city=user.address_city,
            province=user.address_province,
            country=user.address_country,
            postal_code=user.address_postal_code,
        ),
    )


def _lines(rows, status=Status.EN_CARRITO):
    return [CartLine(product_id=pid, quantity=qty, product_price=price, status=status) for qty, pid, price in rows]


def seed(db=None) -> int:
    """Wrzuca dane startowe. Zwraca liczbe utworzonych koszykow (0 gdy baza nie jest pusta)."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(CartModel).first():
            logger.info("Seed skipped, carts already present")
            return 0

        user_repo = UserRepo(db)
        users = {}
        for uid, name, email, role, phone, address in USERS:
            user = user_repo.get_user(uid)
            if user is None:
                number, street, city, province, country, postal_code = address or (None,) * 6
                user = UserModel(
                    id=uid, name=name, email=email, role=role.value, phone=phone,
                    address_number=number, address_street=street, address_city=city,
                    address_province=province, address_country=country, address_postal_code=postal_code,
                )
                user_repo.add_user(user)
            users[uid] = user

        repo = CartRepo(db)
        now = utcnow()
        created = 0
        for uid, rows in ACTIVE_CARTS.items():
            client = _client(users[uid])
            repo.add_cart(Cart(user_id=uid, client=client, cart_lines=_lines(rows)))
            created += 1

            status, created_days, updated_days, order_rows = ORDERS[uid]
            repo.add_cart(
                Cart(
                    user_id=uid,
                    purchased=True,
                    client=client,
                    cart_lines=_lines(order_rows, status),
                    created_at=now - timedelta(days=created_days),
                    updated_at=now - timedelta(days=updated_days),
                )
            )
            created += 1

        repo.commit()
        logger.info("Seed finished", users=len(users), carts=created)
        return created
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    configure_logging()
    init_db()
    seed()
