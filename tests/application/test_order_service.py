from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from hapibara.data.models import CartItemModel, OrderItemModel, OrderModel, ProductModel
from hapibara.domain.errors import (
    EmptyCart,
    InsufficientInventory,
    MissingShippingAddress,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from hapibara.repos.cart_repo import CartRepo
from hapibara.repos.product_repo import ProductRepo
from hapibara.services.order_service import OrderService


def _inventory(db, product):
    db.expire_all()
    return db.get(ProductModel, product.id).inventory


def _cart_count(db, user):
    db.expire_all()
    return db.query(CartItemModel).filter(CartItemModel.user_id == user.id).count()


def _order_count(db):
    db.expire_all()
    return db.query(OrderModel).count()


class TestPlaceOrder:
    def test_happy_path(self, db, make_user, make_product, put_in_cart, shipping_address):
        user = make_user()
        product = make_product(name="Lavender Body Oil", price="100.00", inventory=5)
        put_in_cart(user, product, quantity=1)

        placed = OrderService(db).place_order(user.id, shipping_address)

        assert placed["order_number"].startswith("HB")
        assert placed["status"] == "pending"
        assert placed["subtotal"] == Decimal("100.00")
        assert placed["shipping"] == Decimal("9.99")
        assert placed["tax"] == Decimal("8.00")
        assert placed["total"] == Decimal("117.99")

        assert _inventory(db, product) == 4
        assert _cart_count(db, user) == 0

        order = db.get(OrderModel, placed["order_id"])
        assert order.user_id == user.id
        assert order.payment_status == "pending"
        assert order.payment_method == "stripe"
        assert order.total == Decimal("117.99")
        assert order.shipping_address["zipCode"] == "97201"
        assert [(i.product_id, i.product_name, i.quantity, i.price) for i in order.items] == [
            (product.id, "Lavender Body Oil", 1, Decimal("100.00")),
        ]

    def test_items_keep_cart_snapshot_price(self, db, make_user, make_product, put_in_cart, shipping_address):
        user = make_user()
        product = make_product(price="15.00", inventory=5)
        put_in_cart(user, product, quantity=2, price="10.00")

        placed = OrderService(db).place_order(user.id, shipping_address)

        assert placed["subtotal"] == Decimal("20.00")
        db.expire_all()
        assert db.get(OrderModel, placed["order_id"]).items[0].price == Decimal("10.00")

    def test_empty_cart(self, db, make_user, shipping_address):
        user = make_user()

        with pytest.raises(EmptyCart):
            OrderService(db).place_order(user.id, shipping_address)

        assert _order_count(db) == 0

    def test_missing_shipping_address(self, db, make_user, make_product, put_in_cart):
        user = make_user()
        product = make_product(inventory=5)
        put_in_cart(user, product)

        with pytest.raises(MissingShippingAddress):
            OrderService(db).place_order(user.id, None)

        assert _cart_count(db, user) == 1
        assert _inventory(db, product) == 5

    def test_out_of_stock_changes_nothing(self, db, make_user, make_product, put_in_cart, shipping_address):
        user = make_user()
        product = make_product(name="Bamboo Bowl Set", inventory=1)
        put_in_cart(user, product, quantity=1)
        # stan spadl do zera juz po dodaniu do koszyka
        product.inventory = 0
        db.commit()

        with pytest.raises(InsufficientInventory) as exc:
            OrderService(db).place_order(user.id, shipping_address)

        assert exc.value.product_name == "Bamboo Bowl Set"
        assert "Bamboo Bowl Set" in exc.value.message
        assert _order_count(db) == 0
        assert _cart_count(db, user) == 1
        assert _inventory(db, product) == 0

    def test_one_short_line_fails_whole_order(self, db, make_user, make_product, put_in_cart, shipping_address):
        user = make_user()
        plenty = make_product(inventory=10)
        scarce = make_product(name="Scarce Soap", inventory=1)
        put_in_cart(user, plenty, quantity=2)
        put_in_cart(user, scarce, quantity=2)

        with pytest.raises(InsufficientInventory):
            OrderService(db).place_order(user.id, shipping_address)

        assert _inventory(db, plenty) == 10
        assert _inventory(db, scarce) == 1
        assert _cart_count(db, user) == 2
        assert _order_count(db) == 0

    def test_lost_race_on_decrement_rolls_back(
        self, db, make_user, make_product, put_in_cart, shipping_address, monkeypatch
    ):
        # walidacja przechodzi, ale warunkowy UPDATE juz nie (ktos kupil w miedzyczasie)
        user = make_user()
        first = make_product(inventory=5)
        second = make_product(name="Contested Candle", inventory=5)
        put_in_cart(user, first, quantity=1)
        put_in_cart(user, second, quantity=1)

        real_decrement = ProductRepo.decrement_inventory

        def decrement(self, product_id, quantity):
            if product_id == second.id:
                return False
            return real_decrement(self, product_id, quantity)

        monkeypatch.setattr(ProductRepo, "decrement_inventory", decrement)

        with pytest.raises(InsufficientInventory) as exc:
            OrderService(db).place_order(user.id, shipping_address)

        assert exc.value.product_name == "Contested Candle"
        assert _inventory(db, first) == 5
        assert _cart_count(db, user) == 2
        assert _order_count(db) == 0
        assert db.query(OrderItemModel).count() == 0

    def test_storage_failure_rolls_back_everything(
        self, db, make_user, make_product, put_in_cart, shipping_address, monkeypatch
    ):
        user = make_user()
        product = make_product(inventory=5)
        put_in_cart(user, product, quantity=2)

        def broken_clear(self, user_id):
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(CartRepo, "clear_cart", broken_clear)

        with pytest.raises(PersistenceFailure) as exc:
            OrderService(db).place_order(user.id, shipping_address)

        assert "disk" not in exc.value.message
        assert _order_count(db) == 0
        assert db.query(OrderItemModel).count() == 0
        assert _inventory(db, product) == 5
        assert _cart_count(db, user) == 1

    def test_transient_lock_error_is_retried(
        self, db, make_user, make_product, put_in_cart, shipping_address, monkeypatch
    ):
        user = make_user()
        product = make_product(inventory=5)
        put_in_cart(user, product, quantity=1)

        real_clear = CartRepo.clear_cart
        calls = {"n": 0}

        def flaky_clear(self, user_id):
            calls["n"] += 1
            if calls["n"] == 1:
                raise OperationalError("DELETE FROM cart_items", {}, Exception("database is locked"))
            return real_clear(self, user_id)

        monkeypatch.setattr(CartRepo, "clear_cart", flaky_clear)

        placed = OrderService(db).place_order(user.id, shipping_address)

        assert calls["n"] == 2
        assert _order_count(db) == 1
        assert _inventory(db, product) == 4
        assert placed["order_id"] == db.query(OrderModel).one().id

    def test_order_survives_product_deletion(self, db, make_user, make_product, put_in_cart, shipping_address):
        user = make_user()
        product = make_product(name="Discontinued Granola", inventory=5)
        put_in_cart(user, product, quantity=1)
        placed = OrderService(db).place_order(user.id, shipping_address)

        db.delete(db.get(ProductModel, product.id))
        db.commit()

        order = OrderService(db).get_order(user.id, placed["order_id"])
        assert order["item_count"] == 1
        assert order["items"][0].product_name == "Discontinued Granola"
        assert order["total"] == placed["total"]


@pytest.mark.slow
class TestConcurrentPlacement:
    def test_inventory_never_goes_negative(self, session_factory, db, make_user, make_product, put_in_cart, shipping_address):
        stock = 5
        product = make_product(name="Limited Tempeh Kit", inventory=stock)
        buyers = [make_user() for _ in range(12)]
        for buyer in buyers:
            put_in_cart(buyer, product, quantity=1)

        def attempt(user_id):
            session = session_factory()
            try:
                OrderService(session).place_order(user_id, shipping_address)
                return "ok"
            except InsufficientInventory:
                return "sold_out"
            except PersistenceFailure:
                return "failed"
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(pool.map(attempt, [b.id for b in buyers]))

        successes = results.count("ok")
        assert 1 <= successes <= stock
        assert _inventory(db, product) == stock - successes
        assert _inventory(db, product) >= 0
        assert _order_count(db) == successes
        assert results.count("sold_out") + results.count("failed") == len(buyers) - successes


class TestOrderHistory:
    def _place(self, db, user, product, shipping_address, put_in_cart):
        put_in_cart(user, product, quantity=1)
        return OrderService(db).place_order(user.id, shipping_address)

    def test_lists_newest_first_with_items(self, db, make_user, make_product, put_in_cart, shipping_address):
        user = make_user()
        product = make_product(inventory=10)
        first = self._place(db, user, product, shipping_address, put_in_cart)
        second = self._place(db, user, product, shipping_address, put_in_cart)

        history = OrderService(db).list_orders(user.id)

        assert [o["id"] for o in history["orders"]] == [second["order_id"], first["order_id"]]
        assert history["orders"][0]["item_count"] == 1
        assert history["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 2,
            "total_pages": 1,
            "has_more": False,
        }

    def test_pagination(self, db, make_user, make_product, put_in_cart, shipping_address):
        user = make_user()
        product = make_product(inventory=10)
        for _ in range(3):
            self._place(db, user, product, shipping_address, put_in_cart)

        page_one = OrderService(db).list_orders(user.id, page=1, limit=2)
        page_two = OrderService(db).list_orders(user.id, page=2, limit=2)

        assert len(page_one["orders"]) == 2
        assert page_one["pagination"]["has_more"] is True
        assert len(page_two["orders"]) == 1
        assert page_two["pagination"]["has_more"] is False
        assert page_two["pagination"]["total_pages"] == 2

    def test_status_filter(self, db, make_user, make_product, put_in_cart, shipping_address):
        user = make_user()
        product = make_product(inventory=10)
        placed = self._place(db, user, product, shipping_address, put_in_cart)
        self._place(db, user, product, shipping_address, put_in_cart)
        order = db.get(OrderModel, placed["order_id"])
        order.status = "shipped"
        db.commit()

        shipped = OrderService(db).list_orders(user.id, status="shipped")

        assert [o["id"] for o in shipped["orders"]] == [placed["order_id"]]
        assert shipped["pagination"]["total"] == 1

    def test_unknown_status_is_rejected(self, db, make_user):
        with pytest.raises(ValidationError):
            OrderService(db).list_orders(make_user().id, status="lost")

    def test_only_own_orders(self, db, make_user, make_product, put_in_cart, shipping_address):
        owner = make_user()
        other = make_user()
        placed = self._place(db, owner, make_product(inventory=10), shipping_address, put_in_cart)

        assert OrderService(db).list_orders(other.id)["orders"] == []
        with pytest.raises(NotFoundError):
            OrderService(db).get_order(other.id, placed["order_id"])
