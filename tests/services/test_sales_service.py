from decimal import Decimal

import pytest

from dawazon.domain.cart import Status
from dawazon.domain.errors import Forbidden, InvalidTransition, NotFound

GALAXY = "Hx9Lp2Ks4TnB"
FUNDA = "Fp2Jk7Xm4YzT"
CABLE = "Dk5Mn8Pj2WcX"


@pytest.fixture()
def orders(cart_service):
    cart_service.add_product(3, GALAXY)
    cart_service.add_product(3, CABLE, 2)
    john = cart_service.checkout(3)

    cart_service.add_product(4, FUNDA, 3)
    jane = cart_service.checkout(4)
    return john, jane


class TestSaleLines:
    def test_admin_sees_every_line_newest_first(self, sales_service, orders):
        john, jane = orders
        lines, total = sales_service.list_sale_lines(1)

        assert total == 3
        assert [(s.sale_id, s.product_id) for s in lines] == [
            (jane.id, FUNDA),
            (john.id, GALAXY),
            (john.id, CABLE),
        ]
        assert lines[0].product_name == "Funda de silicona"
        assert lines[0].client.name == "Jane Smith"

    def test_manager_sees_only_own_products(self, sales_service, orders):
        lines, total = sales_service.list_sale_lines(2)
        assert total == 2
        assert {s.product_id for s in lines} == {GALAXY, FUNDA}

        lines, total = sales_service.list_sale_lines(8)
        assert [s.product_id for s in lines] == [CABLE]
        assert lines[0].manager_id == 8

    def test_pagination(self, sales_service, orders):
        first, total = sales_service.list_sale_lines(1, page=0, size=2)
        second, _ = sales_service.list_sale_lines(1, page=1, size=2)

        assert total == 3
        assert len(first) == 2
        assert len(second) == 1

    def test_lines_without_catalog_product_are_skipped(self, sales_service, catalog, orders):
        del catalog.products[CABLE]
        lines, total = sales_service.list_sale_lines(1)

        assert total == 2
        assert CABLE not in {s.product_id for s in lines}

    def test_shoppers_are_forbidden(self, sales_service, orders):
        with pytest.raises(Forbidden):
            sales_service.list_sale_lines(3)

    def test_active_cart_is_not_a_sale(self, sales_service, cart_service, orders):
        cart = cart_service.add_product(3, FUNDA)
        with pytest.raises(NotFound):
            sales_service.get_sale_line(1, cart.id, FUNDA)


class TestEarnings:
    def test_admin_total(self, sales_service, orders):
        total, manager_id = sales_service.total_earnings(1)

        assert total == Decimal("829.94")
        assert manager_id is None

    def test_manager_total(self, sales_service, orders):
        total, manager_id = sales_service.total_earnings(2)

        assert total == Decimal("789.96")
        assert manager_id == 2

    def test_cancelled_lines_do_not_count(self, sales_service, orders):
        john, _ = orders
        sales_service.cancel_sale(1, john.id, CABLE)

        total, _ = sales_service.total_earnings(1)
        assert total == Decimal("789.96")


class TestStatusChanges:
    def test_admin_moves_line_forward(self, sales_service, orders):
        john, _ = orders
        line = sales_service.update_line_status(1, john.id, GALAXY, Status.PREPARADO)

        assert line.status is Status.PREPARADO
        assert sales_service.get_sale_line(1, john.id, CABLE).status is Status.EN_CARRITO

    def test_manager_cannot_touch_foreign_products(self, sales_service, orders):
        john, _ = orders
        with pytest.raises(Forbidden):
            sales_service.update_line_status(8, john.id, GALAXY, Status.PREPARADO)

    def test_illegal_transition(self, sales_service, orders):
        john, _ = orders
        with pytest.raises(InvalidTransition):
            sales_service.update_line_status(1, john.id, GALAXY, Status.RECIBIDO)


class TestCancelSale:
    def test_cancel_returns_stock(self, sales_service, catalog, orders):
        john, _ = orders
        assert catalog.stock(CABLE) == 3

        line = sales_service.cancel_sale(8, john.id, CABLE)

        assert line.status is Status.CANCELADO
        assert catalog.stock(CABLE) == 5

    def test_second_cancel_is_a_no_op(self, sales_service, catalog, orders):
        john, _ = orders
        sales_service.cancel_sale(1, john.id, CABLE)
        line = sales_service.cancel_sale(1, john.id, CABLE)

        assert line.status is Status.CANCELADO
        assert catalog.stock(CABLE) == 5

    def test_received_line_cannot_be_cancelled(self, sales_service, orders):
        john, _ = orders
        for status in (Status.PREPARADO, Status.ENVIADO, Status.RECIBIDO):
            sales_service.update_line_status(1, john.id, GALAXY, status)

        with pytest.raises(InvalidTransition):
            sales_service.cancel_sale(1, john.id, GALAXY)


class TestCartListing:
    def test_admin_filters_carts(self, sales_service, orders):
        purchased, total = sales_service.list_carts(1, purchased=True)
        assert total == 2

        johns, total = sales_service.list_carts(1, user_id=3)
        assert total == 2
        assert {c.purchased for c in johns} == {True, False}

    def test_managers_cannot_list_carts(self, sales_service, orders):
        with pytest.raises(Forbidden):
            sales_service.list_carts(2)
