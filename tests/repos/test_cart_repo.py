from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from dawazon.domain.cart import Address, Cart, Client, Status, utcnow
from dawazon.repos.cart_repo import CartRepo

CLIENT = Client(
    name="Jane Smith",
    email="jane.smith@email.com",
    phone="+34666555666",
    address=Address(number=15, street="Paseo de Gracia", city="Barcelona", province="Barcelona", country="España", postal_code="08007"),
)


@pytest.fixture()
def repo(db, users):
    return CartRepo(db)


def _store(repo, cart):
    repo.add_cart(cart)
    repo.commit()
    return cart


class TestAddAndLoad:
    def test_round_trip(self, repo):
        cart = Cart.create(4, client=CLIENT)
        cart.add_line("Yw3Zq7Vm1RfG", 1, Decimal("1099.99"))
        cart.add_line("Qs1Zw8Ty3NlJ", 2, Decimal("59.99"))
        _store(repo, cart)

        loaded = repo.get_cart(cart.id)

        assert loaded.user_id == 4
        assert loaded.client == CLIENT
        assert loaded.client.address.postal_code == "08007"
        assert [(l.product_id, l.quantity, l.product_price) for l in loaded.cart_lines] == [
            ("Yw3Zq7Vm1RfG", 1, Decimal("1099.99")),
            ("Qs1Zw8Ty3NlJ", 2, Decimal("59.99")),
        ]
        assert loaded.total_items == 3
        assert loaded.total == Decimal("1219.97")
        assert loaded.version == 1

    def test_timestamps_come_back_in_utc(self, repo):
        cart = _store(repo, Cart.create(4))
        loaded = repo.get_cart(cart.id)

        assert loaded.created_at.tzinfo is not None
        assert loaded.created_at == cart.created_at

    def test_missing_cart(self, repo):
        assert repo.get_cart("does-not-exist") is None

    def test_active_cart_by_user(self, repo):
        old = Cart.create(3, client=CLIENT)
        old.add_line("A", 1, Decimal("1.00"))
        old.checkout()
        _store(repo, old)
        active = _store(repo, Cart.create(3))

        assert repo.get_active_cart_by_user(3).id == active.id
        assert repo.get_active_cart_by_user(4) is None

    def test_only_one_active_cart_per_user(self, repo, db):
        _store(repo, Cart.create(3))

        with pytest.raises(IntegrityError):
            repo.add_cart(Cart.create(3))
        db.rollback()


class TestUpdate:
    def test_bumps_version_and_rewrites_lines(self, repo):
        cart = _store(repo, Cart.create(3))
        cart.add_line("A", 1, Decimal("10.00"))
        cart.add_line("B", 1, Decimal("5.00"))

        assert repo.update_cart(cart) == 1
        repo.commit()
        assert cart.version == 2

        cart.remove_line("A")
        cart.update_quantity("B", 3)
        assert repo.update_cart(cart) == 1
        repo.commit()

        loaded = repo.get_cart(cart.id)
        assert loaded.version == 3
        assert [(l.product_id, l.quantity) for l in loaded.cart_lines] == [("B", 3)]
        assert loaded.total == Decimal("15.00")

    def test_stale_version_is_not_written(self, repo):
        cart = _store(repo, Cart.create(3))
        stale = repo.get_cart(cart.id)

        cart.add_line("A", 1, Decimal("10.00"))
        repo.update_cart(cart)
        repo.commit()

        stale.add_line("B", 1, Decimal("5.00"))
        assert repo.update_cart(stale) == 0
        repo.rollback()

        loaded = repo.get_cart(cart.id)
        assert [l.product_id for l in loaded.cart_lines] == ["A"]
        assert loaded.version == 2

    def test_line_status_is_persisted(self, repo):
        cart = Cart.create(3, client=CLIENT)
        cart.add_line("A", 1, Decimal("10.00"))
        cart.checkout()
        _store(repo, cart)

        cart.transition_line_status("A", Status.PREPARADO)
        repo.update_cart(cart)
        repo.commit()

        assert repo.get_cart(cart.id).cart_lines[0].status is Status.PREPARADO


class TestListing:
    @pytest.fixture()
    def carts(self, repo):
        now = utcnow()
        stored = []
        for days, user_id in ((30, 3), (20, 4), (10, 3)):
            cart = Cart(user_id=user_id, client=CLIENT, created_at=now - timedelta(days=days))
            cart.add_line("A", 1, Decimal("1.00"))
            cart.checkout()
            stored.append(_store(repo, cart))
        stored.append(_store(repo, Cart.create(3)))
        return stored

    def test_newest_first(self, repo, carts):
        found, total = repo.list_carts()

        assert total == 4
        assert [c.id for c in found] == [carts[3].id, carts[2].id, carts[1].id, carts[0].id]

    def test_filters(self, repo, carts):
        purchased, total = repo.list_carts(user_id=3, purchased=True)
        assert total == 2
        assert [c.id for c in purchased] == [carts[2].id, carts[0].id]

        active, total = repo.list_carts(purchased=False)
        assert total == 1
        assert active[0].id == carts[3].id

    def test_pagination(self, repo, carts):
        page, total = repo.list_carts(offset=2, limit=2)

        assert total == 4
        assert [c.id for c in page] == [carts[1].id, carts[0].id]

    def test_stale_checkouts(self, repo):
        now = utcnow()
        stale = Cart.create(3)
        stale.add_line("A", 1, Decimal("1.00"))
        stale.begin_checkout(now=now - timedelta(minutes=10))
        _store(repo, stale)

        fresh = Cart.create(4)
        fresh.add_line("A", 1, Decimal("1.00"))
        fresh.begin_checkout(now=now)
        _store(repo, fresh)

        found = repo.list_checkouts_started_before(now - timedelta(minutes=5))
        assert [c.id for c in found] == [stale.id]
