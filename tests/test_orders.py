"""Tests for order settlement and the order lifecycle."""

from decimal import Decimal

import pytest
from sqlalchemy import text

from pawpal_market.models.order import Order, OrderItem
from pawpal_market.models.points import PointsLedgerEntry
from pawpal_market.models.product import Product
from pawpal_market.schemas.order import OrderCreate
from pawpal_market.services.exceptions import InsufficientStockError, InvalidStatusTransitionError
from pawpal_market.services.order_service import OrderService
from pawpal_market.services.points_service import PointsService
from tests.conftest import ADMIN_HEADERS, ALICE, ALICE_HEADERS, BOB_HEADERS


ADDRESS = {"city": "X"}


def place(client, items, headers=ALICE_HEADERS, address=ADDRESS):
    return client.post(
        "/api/orders",
        json={"items": items, "shipping_address": address},
        headers=headers,
    )


class TestPlaceOrder:
    """Tests for settlement through the API."""

    def test_checkout_settles_stock_points_and_cart(self, client, db, make_product, publisher):
        product = make_product(price=50, stock_quantity=2)
        client.post("/api/cart", json={"product_id": product.id, "quantity": 2}, headers=ALICE_HEADERS)

        response = place(client, [{"product_id": product.id, "quantity": 2}])

        assert response.status_code == 200
        order = response.json()["data"]
        assert order["status"] == "pending"
        assert order["order_number"].startswith("PW")
        assert order["subtotal"] == 100.0
        assert order["total_items"] == 2
        assert order["shipping_amount"] == 0.0
        assert order["tax_amount"] == 8.0
        assert order["total_amount"] == 108.0
        assert order["discount_amount"] == 0.0
        assert order["points_earned"] == 27
        assert order["shipping_address"] == ADDRESS
        assert order["items"][0]["unit_price"] == 50.0
        assert order["items"][0]["total_price"] == 100.0
        assert order["items"][0]["product"]["id"] == product.id

        db.expire_all()
        assert db.get(Product, product.id).stock_quantity == 0
        entries = db.query(PointsLedgerEntry).filter(PointsLedgerEntry.user_id == ALICE.id).all()
        assert [(e.points, e.type, e.order_id) for e in entries] == [(27, "purchase_reward", order["id"])]
        assert client.get("/api/points/balance", headers=ALICE_HEADERS).json()["data"] == {"points": 27}

        # Purchased products leave the cart
        assert client.get("/api/cart", headers=ALICE_HEADERS).json()["data"]["items"] == []

        assert [name for name, _ in publisher.events] == ["OrderCreated"]
        assert publisher.events[0][1]["order_number"] == order["order_number"]

        # The next checkout finds no stock left
        response = place(client, [{"product_id": product.id, "quantity": 1}], headers=BOB_HEADERS)
        assert response.status_code == 422
        assert response.json() == {"success": False, "message": "Insufficient stock for Smart Feeder."}

    def test_small_order_pays_shipping_and_earns_nothing(self, client, db, make_product):
        product = make_product(price=20, stock_quantity=5)

        order = place(client, [{"product_id": product.id, "quantity": 2}]).json()["data"]

        assert order["subtotal"] == 40.0
        assert order["shipping_amount"] == 9.99
        assert order["tax_amount"] == 3.2
        assert order["total_amount"] == 53.19
        assert order["points_earned"] == 0
        assert db.query(PointsLedgerEntry).count() == 0

    def test_reward_threshold_uses_total_not_subtotal(self, client, make_product):
        # 95 + 9.99 shipping + 7.60 tax = 112.59 -> 28 points
        product = make_product(price=95, stock_quantity=5)

        order = place(client, [{"product_id": product.id, "quantity": 1}]).json()["data"]

        assert order["total_amount"] == 112.59
        assert order["points_earned"] == 28

    def test_failure_at_later_line_leaves_nothing_behind(self, client, db, make_product, publisher):
        first = make_product(name="Water Fountain", price=30, stock_quantity=5)
        second = make_product(name="Laser Toy", price=20, stock_quantity=1)

        response = place(client, [
            {"product_id": first.id, "quantity": 2},
            {"product_id": second.id, "quantity": 3},
        ])

        assert response.status_code == 422
        assert response.json()["message"] == "Insufficient stock for Laser Toy."
        db.expire_all()
        assert db.get(Product, first.id).stock_quantity == 5
        assert db.get(Product, second.id).stock_quantity == 1
        assert db.query(Order).count() == 0
        assert db.query(OrderItem).count() == 0
        assert db.query(PointsLedgerEntry).count() == 0
        assert publisher.events == []

    def test_missing_product_aborts(self, client, db, make_product):
        product = make_product(stock_quantity=5)

        response = place(client, [
            {"product_id": product.id, "quantity": 1},
            {"product_id": 4242, "quantity": 1},
        ])

        assert response.status_code == 422
        assert response.json()["message"] == "A product in your cart is no longer available."
        db.expire_all()
        assert db.get(Product, product.id).stock_quantity == 5
        assert db.query(Order).count() == 0

    def test_repeated_lines_cannot_oversell(self, client, db, make_product):
        product = make_product(price=10, stock_quantity=3)

        response = place(client, [
            {"product_id": product.id, "quantity": 2},
            {"product_id": product.id, "quantity": 2},
        ])

        assert response.status_code == 422
        db.expire_all()
        assert db.get(Product, product.id).stock_quantity == 3

    def test_total_invariant_holds(self, client, db, make_product):
        a = make_product(name="A", price=12.35, stock_quantity=9)
        b = make_product(name="B", price=7.10, stock_quantity=9)

        order_id = place(client, [
            {"product_id": a.id, "quantity": 3},
            {"product_id": b.id, "quantity": 4},
        ]).json()["data"]["id"]

        order = db.get(Order, order_id)
        subtotal = sum(item.total_price for item in order.items)
        assert subtotal == Decimal("65.45")
        assert order.total_amount == subtotal + order.shipping_amount + order.tax_amount - order.discount_amount

    def test_price_snapshot_survives_catalog_change(self, client, make_product):
        product = make_product(price=50, stock_quantity=5)
        order_id = place(client, [{"product_id": product.id, "quantity": 1}]).json()["data"]["id"]

        client.put(f"/api/products/{product.id}", json={"price": 80}, headers=ADMIN_HEADERS)
        order = client.get(f"/api/orders/{order_id}", headers=ALICE_HEADERS).json()["data"]

        assert order["items"][0]["unit_price"] == 50.0
        assert order["items"][0]["product"]["price"] == 80.0

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"items": [], "shipping_address": ADDRESS}, "items"),
            ({"items": [{"product_id": 1, "quantity": 1}]}, "shipping_address"),
            ({"items": [{"product_id": 1, "quantity": 1}], "shipping_address": {}}, "shipping_address"),
            ({"items": [{"product_id": 1, "quantity": 0}], "shipping_address": ADDRESS}, "items.0.quantity"),
        ],
    )
    def test_validation_errors(self, client, db, payload, field):
        response = client.post("/api/orders", json=payload, headers=ALICE_HEADERS)

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert field in body["errors"]
        assert db.query(Order).count() == 0


class TestStaleStockRead:
    """The atomic decrement catches stock taken after the product was read."""

    def test_concurrent_checkout_loses(self, db, session_factory, make_product, publisher):
        product = make_product(price=50, stock_quantity=1)
        assert product.stock_quantity == 1

        # Another checkout drains the stock behind this session's back
        other = session_factory()
        other.execute(text("UPDATE products SET stock_quantity = 0 WHERE id = :id"), {"id": product.id})
        other.commit()
        other.close()

        service = OrderService(db, publisher)
        with pytest.raises(InsufficientStockError):
            service.place_order(ALICE.id, OrderCreate(
                items=[{"product_id": product.id, "quantity": 1}],
                shipping_address=ADDRESS,
            ))

        db.expire_all()
        assert db.get(Product, product.id).stock_quantity == 0
        assert db.query(Order).count() == 0


class TestOrderQueries:
    """Tests for listing and fetching orders."""

    def test_users_see_only_their_orders(self, client, make_product):
        product = make_product(stock_quantity=10)
        mine = place(client, [{"product_id": product.id, "quantity": 1}]).json()["data"]
        theirs = place(client, [{"product_id": product.id, "quantity": 1}], headers=BOB_HEADERS).json()["data"]

        page = client.get("/api/orders", headers=ALICE_HEADERS).json()["data"]
        assert [o["id"] for o in page["items"]] == [mine["id"]]
        assert page["total"] == 1

        assert client.get(f"/api/orders/{theirs['id']}", headers=ALICE_HEADERS).status_code == 404

    def test_admin_lists_every_order(self, client, make_product):
        product = make_product(stock_quantity=10)
        place(client, [{"product_id": product.id, "quantity": 1}])
        place(client, [{"product_id": product.id, "quantity": 1}], headers=BOB_HEADERS)

        response = client.get("/api/admin/orders", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["data"]["total"] == 2
        assert client.get("/api/admin/orders", headers=ALICE_HEADERS).status_code == 403


class TestStatusTransitions:
    """Tests for the privileged status update."""

    @pytest.fixture
    def order_id(self, client, make_product):
        product = make_product(stock_quantity=5)
        return place(client, [{"product_id": product.id, "quantity": 1}]).json()["data"]["id"]

    def update(self, client, order_id, status, headers=ADMIN_HEADERS):
        return client.post(f"/api/admin/orders/{order_id}/status", json={"status": status}, headers=headers)

    def test_full_lifecycle(self, client, order_id, publisher):
        for status in ("confirmed", "processing", "shipped", "delivered"):
            response = self.update(client, order_id, status)
            assert response.status_code == 200
            assert response.json()["data"]["status"] == status

        changes = [data for name, data in publisher.events if name == "OrderStatusChanged"]
        assert [(c["old_status"], c["new_status"]) for c in changes] == [
            ("pending", "confirmed"),
            ("confirmed", "processing"),
            ("processing", "shipped"),
            ("shipped", "delivered"),
        ]

    def test_cancel_from_confirmed(self, client, order_id):
        assert self.update(client, order_id, "confirmed").status_code == 200
        assert self.update(client, order_id, "cancelled").json()["data"]["status"] == "cancelled"

    def test_cannot_skip_or_reverse(self, client, order_id):
        response = self.update(client, order_id, "shipped")
        assert response.status_code == 422
        assert response.json()["message"] == "Cannot change order status from pending to shipped."

        self.update(client, order_id, "confirmed")
        self.update(client, order_id, "processing")
        assert self.update(client, order_id, "cancelled").status_code == 422
        assert self.update(client, order_id, "pending").status_code == 422

    def test_unknown_status_is_validation_error(self, client, order_id):
        assert self.update(client, order_id, "lost").status_code == 422

    def test_requires_admin(self, client, order_id):
        assert self.update(client, order_id, "confirmed", headers=ALICE_HEADERS).status_code == 403

    def test_missing_order(self, client):
        assert self.update(client, 777, "confirmed").status_code == 404

    def test_service_rejects_transition_from_terminal_state(self, db, order_id, publisher):
        service = OrderService(db, publisher)
        service.update_order_status(order_id, "cancelled")

        with pytest.raises(InvalidStatusTransitionError):
            service.update_order_status(order_id, "confirmed")


class TestRewardLedger:
    """Settlement credits the ledger, never a counter."""

    def test_two_orders_add_up(self, client, db, make_product):
        product = make_product(price=100, stock_quantity=5)

        place(client, [{"product_id": product.id, "quantity": 1}])
        place(client, [{"product_id": product.id, "quantity": 1}])

        # 100 + 8 tax = 108 -> 27 points each
        assert PointsService(db).balance(ALICE.id) == 54
