import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["LOG_DIR"] = ""

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import dawazon.data.models  # noqa: F401
from dawazon.api.dependencies import (
    get_lock_service,
    get_notification_service,
    get_product_client,
)
from dawazon.data.database import Base, get_db
from dawazon.data.models.user import UserModel
from dawazon.domain.errors import InsufficientStock, NotFound
from dawazon.services.cart_service import CartService
from dawazon.services.lock_service import LockService
from dawazon.services.sales_service import SalesService

PHONE = "+34666333444"
GALAXY = "Hx9Lp2Ks4TnB"
FUNDA = "Fp2Jk7Xm4YzT"
CABLE = "Dk5Mn8Pj2WcX"

CATALOG = [
    {"id": GALAXY, "name": "Smartphone Galaxy S23", "price": 699.99, "stock": 10, "creator_id": 2},
    {"id": FUNDA, "name": "Funda de silicona", "price": 29.99, "stock": 50, "creator_id": 2},
    {"id": CABLE, "name": "Cable USB-C", "price": 19.99, "stock": 5, "creator_id": 8},
]


class FakeProductClient:
    """In-memory catalog with the same contract as ProductClient."""

    def __init__(self, products):
        self.products = {p["id"]: dict(p) for p in products}
        self.stock_calls = []

    def fetch_product(self, product_id):
        if product_id not in self.products:
            raise NotFound(f"Product {product_id} not found")
        return dict(self.products[product_id])

    def adjust_stock(self, product_id, delta):
        product = self.products.get(product_id)
        if product is None:
            raise NotFound(f"Product {product_id} not found")
        if product["stock"] + delta < 0:
            raise InsufficientStock(product_id, -delta, product["stock"])
        product["stock"] += delta
        self.stock_calls.append((product_id, delta))
        return product["stock"]

    def stock(self, product_id):
        return self.products[product_id]["stock"]


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_order_confirmation(self, cart_id):
        self.sent.append(cart_id)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def users(db):
    db.add_all(
        [
            UserModel(id=1, name="Admin", email="admin@dawazon.es", role="ADMIN"),
            UserModel(id=2, name="Manager", email="manager@dawazon.es", role="MANAGER"),
            UserModel(
                id=3,
                name="John Doe",
                email="john.doe@email.com",
                role="USER",
                phone=PHONE,
                address_number=42,
                address_street="Gran Vía",
                address_city="Madrid",
                address_province="Madrid",
                address_country="España",
                address_postal_code="28013",
            ),
            UserModel(id=4, name="Jane Smith", email="jane.smith@email.com", role="USER"),
            UserModel(id=8, name="Other Manager", email="other@dawazon.es", role="MANAGER"),
            UserModel(id=9, name="No Email", role="USER"),
        ]
    )
    db.commit()


@pytest.fixture()
def catalog():
    return FakeProductClient(CATALOG)


@pytest.fixture()
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def lock_service(redis_client):
    return LockService(client=redis_client)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def cart_service(db, users, catalog, lock_service, notifier):
    return CartService(
        db=db,
        product_client=catalog,
        lock_service=lock_service,
        notification_service=notifier,
    )


@pytest.fixture()
def sales_service(db, catalog, cart_service):
    return SalesService(db=db, product_client=catalog, cart_service=cart_service)


@pytest.fixture()
def client(db, users, catalog, lock_service, notifier):
    from dawazon.main import create_app

    app = create_app()
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_product_client] = lambda: catalog
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_notification_service] = lambda: notifier
    return TestClient(app)
