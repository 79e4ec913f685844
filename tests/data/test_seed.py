from decimal import Decimal

from dawazon.data.seed import seed
from dawazon.domain.cart import Status
from dawazon.repos.cart_repo import CartRepo


class TestSeed:
    def test_loads_sample_carts_once(self, db):
        assert seed(db) == 10
        assert seed(db) == 0

    def test_active_carts(self, db):
        seed(db)
        repo = CartRepo(db)

        john = repo.get_active_cart_by_user(3)
        assert john.total == Decimal("759.97")
        assert john.total_items == 3
        assert john.client.address.street == "Gran Vía"

        assert repo.get_active_cart_by_user(7).is_empty

    def test_history(self, db):
        seed(db)
        repo = CartRepo(db)

        orders, total = repo.list_carts(purchased=True)
        assert total == 5
        #najnowsze pierwsze: Pedro (2 dni), Carlos (7), Jane (15), Maria (30), John (45)
        assert [o.user_id for o in orders] == [7, 5, 4, 6, 3]
        assert {l.status for l in orders[1].cart_lines} == {Status.ENVIADO}
        assert orders[2].client.address.postal_code == "08007"

    def test_staff_has_no_carts(self, db):
        seed(db)
        carts, total = CartRepo(db).list_carts(user_id=1)
        assert total == 0
