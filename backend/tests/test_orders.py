"""
Order lifecycle tests.

Verifies:
- Daily limit of 3 non-cancelled orders per employee
- Fulfillment decrements stock by one, clamped at zero, with one ledger row
- Status only moves out of pending, once
- Cancellation ownership rules and who hears about it
"""

import pytest

from conftest import auth_headers, drain, get_auth_token
from office_beverages.extensions import db
from office_beverages.models import Beverage, InventoryTransaction, Order
from office_beverages.services.notification_hub import user_room


def _place(client, headers, beverage_id, **extra):
    body = {"beverage_id": beverage_id, **extra}
    return client.post("/api/orders", json=body, headers=headers)


def _set_stock(beverage_id: int, quantity: int) -> None:
    beverage = db.session.get(Beverage, beverage_id)
    beverage.stock_quantity = quantity
    db.session.commit()


def _stock(beverage_id: int) -> int:
    db.session.expire_all()
    return db.session.get(Beverage, beverage_id).stock_quantity


# =============================================================================
# PLACEMENT AND DAILY LIMIT
# =============================================================================


class TestPlaceOrder:

    def test_employee_places_pending_order(self, client, seed, employee_headers):
        espresso = seed["beverages"]["Espresso"]
        resp = _place(
            client, employee_headers, espresso.id,
            cup_size="large", sugar_quantity="2", add_ons=["milk"], remarks="hot please",
        )

        assert resp.status_code == 201
        data = resp.json["data"]
        assert data["status"] == "pending"
        assert data["cup_size"] == "large"
        assert data["sugar_quantity"] == "2"
        assert data["add_ons"] == ["milk"]
        assert data["employee"]["username"] == "ahmed"
        assert data["beverage"]["name"] == "Espresso"

    def test_defaults_small_no_sugar(self, client, seed, employee_headers):
        resp = _place(client, employee_headers, seed["beverages"]["Latte"].id)
        assert resp.status_code == 201
        assert resp.json["data"]["cup_size"] == "small"
        assert resp.json["data"]["sugar_quantity"] == "none"

    def test_fourth_order_same_day_rejected(self, client, seed, employee_headers):
        espresso = seed["beverages"]["Espresso"]
        for _ in range(3):
            assert _place(client, employee_headers, espresso.id).status_code == 201

        resp = _place(client, employee_headers, espresso.id)
        assert resp.status_code == 409
        assert resp.json["success"] is False
        assert resp.json["message"] == "You have reached your daily order limit (3 orders per day)"

    def test_cancelled_orders_do_not_count(self, client, seed, employee_headers):
        espresso = seed["beverages"]["Espresso"]
        ids = [_place(client, employee_headers, espresso.id).json["data"]["id"] for _ in range(3)]

        resp = client.patch(f"/api/orders/{ids[0]}/cancel", headers=employee_headers)
        assert resp.status_code == 200

        assert _place(client, employee_headers, espresso.id).status_code == 201

    def test_limit_is_per_employee(self, client, seed, employee_headers, other_employee_headers):
        espresso = seed["beverages"]["Espresso"]
        for _ in range(3):
            _place(client, employee_headers, espresso.id)

        assert _place(client, other_employee_headers, espresso.id).status_code == 201

    def test_daily_limit_status(self, client, seed, employee_headers):
        _place(client, employee_headers, seed["beverages"]["Espresso"].id)

        resp = client.get("/api/orders/daily-limit", headers=employee_headers)
        assert resp.status_code == 200
        assert resp.json["data"] == {"canOrder": True, "ordersToday": 1, "remaining": 2, "limit": 3}

    def test_limit_follows_app_config(self, app, client, seed, employee_headers, monkeypatch):
        monkeypatch.setitem(app.config, "MAX_ORDERS_PER_DAY", 1)
        espresso = seed["beverages"]["Espresso"]

        assert _place(client, employee_headers, espresso.id).status_code == 201
        resp = _place(client, employee_headers, espresso.id)

        assert resp.status_code == 409
        assert resp.json["message"] == "You have reached your daily order limit (1 orders per day)"
        limit = client.get("/api/orders/daily-limit", headers=employee_headers).json["data"]
        assert limit == {"canOrder": False, "ordersToday": 1, "remaining": 0, "limit": 1}

    def test_out_of_stock_rejected(self, client, seed, employee_headers):
        espresso = seed["beverages"]["Espresso"]
        _set_stock(espresso.id, 0)

        resp = _place(client, employee_headers, espresso.id)
        assert resp.status_code == 400
        assert resp.json["message"] == "Beverage is out of stock"

    def test_inactive_beverage_rejected(self, client, seed, employee_headers):
        latte = seed["beverages"]["Latte"]
        latte.is_active = False
        db.session.commit()

        resp = _place(client, employee_headers, latte.id)
        assert resp.status_code == 400
        assert resp.json["message"] == "Beverage is not available"

    def test_unknown_beverage_404(self, client, seed, employee_headers):
        resp = _place(client, employee_headers, 99999)
        assert resp.status_code == 404
        assert resp.json["message"] == "Beverage not found"

    def test_invalid_choices_reported_per_field(self, client, seed, employee_headers):
        resp = _place(
            client, employee_headers, seed["beverages"]["Latte"].id,
            cup_size="huge", sugar_quantity="7", add_ons="milk",
        )
        assert resp.status_code == 400
        fields = {e["field"] for e in resp.json["errors"]}
        assert {"cup_size", "sugar_quantity"} <= fields

    def test_new_order_reaches_office_boys(self, client, seed, hub, employee_headers):
        office_boy = seed["users"]["officeBoy"]
        sub = hub.subscribe(office_boy.id, office_boy.role)
        try:
            _place(client, employee_headers, seed["beverages"]["Espresso"].id)
            events = drain(sub)
        finally:
            hub.unsubscribe(sub)

        assert [e["type"] for e in events] == ["new_order"]
        assert events[0]["order"]["employee_name"] == "Ahmed Hassan"


# =============================================================================
# FULFILLMENT
# =============================================================================


class TestFulfillOrder:

    def test_fulfill_decrements_stock_and_records_deduction(
        self, client, seed, hub, employee_headers, office_boy_headers
    ):
        ahmed = seed["users"]["ahmed"]
        espresso = seed["beverages"]["Espresso"]
        before = espresso.stock_quantity
        order_id = _place(client, employee_headers, espresso.id).json["data"]["id"]

        sub = hub.subscribe(ahmed.id, ahmed.role)
        try:
            resp = client.patch(f"/api/orders/{order_id}/fulfill", headers=office_boy_headers)
            events = drain(sub)
        finally:
            hub.unsubscribe(sub)

        assert resp.status_code == 200
        data = resp.json["data"]
        assert data["status"] == "fulfilled"
        assert data["fulfilled_by"] == seed["users"]["officeBoy"].id
        assert data["fulfilled_at"] is not None

        assert _stock(espresso.id) == before - 1

        txs = db.session.query(InventoryTransaction).filter_by(order_id=order_id).all()
        assert len(txs) == 1
        assert txs[0].transaction_type == "order_deduction"
        assert txs[0].quantity == -1
        assert txs[0].reason == "Order fulfillment"

        assert sub.rooms == {user_room(ahmed.id)}
        assert [e["type"] for e in events] == ["order_fulfilled"]
        assert events[0]["order"]["id"] == order_id

    def test_stock_clamps_at_zero(self, client, seed, employee_headers, other_employee_headers, office_boy_headers):
        mango = seed["beverages"]["Mango Smoothie"]
        _set_stock(mango.id, 1)
        first = _place(client, employee_headers, mango.id).json["data"]["id"]
        second = _place(client, other_employee_headers, mango.id).json["data"]["id"]

        assert client.patch(f"/api/orders/{first}/fulfill", headers=office_boy_headers).status_code == 200
        assert _stock(mango.id) == 0

        assert client.patch(f"/api/orders/{second}/fulfill", headers=office_boy_headers).status_code == 200
        assert _stock(mango.id) == 0

    def test_low_stock_alert_goes_to_admins(self, client, seed, hub, employee_headers, office_boy_headers):
        admin = seed["users"]["admin"]
        berry = seed["beverages"]["Berry Smoothie"]
        _set_stock(berry.id, berry.min_stock_alert + 1)
        order_id = _place(client, employee_headers, berry.id).json["data"]["id"]

        sub = hub.subscribe(admin.id, admin.role)
        try:
            client.patch(f"/api/orders/{order_id}/fulfill", headers=office_boy_headers)
            events = drain(sub)
        finally:
            hub.unsubscribe(sub)

        low = [e for e in events if e["type"] == "low_stock"]
        assert len(low) == 1
        assert low[0]["beverage"]["current_stock"] == berry.min_stock_alert

    def test_employee_cannot_fulfill(self, client, seed, employee_headers):
        order_id = _place(client, employee_headers, seed["beverages"]["Latte"].id).json["data"]["id"]
        resp = client.patch(f"/api/orders/{order_id}/fulfill", headers=employee_headers)
        assert resp.status_code == 403

    def test_missing_order_404(self, client, seed, office_boy_headers):
        resp = client.patch("/api/orders/424242/fulfill", headers=office_boy_headers)
        assert resp.status_code == 404
        assert resp.json["message"] == "Order not found"

    def test_pending_order_for_deleted_beverage(
        self, client, db_session, seed, employee_headers, office_boy_headers, admin_headers
    ):
        latte = seed["beverages"]["Latte"]
        order_id = _place(client, employee_headers, latte.id).json["data"]["id"]
        client.delete(f"/api/beverages/{latte.id}", headers=admin_headers)

        resp = client.patch(f"/api/orders/{order_id}/fulfill", headers=office_boy_headers)

        assert resp.status_code == 400
        assert resp.json["message"] == "Beverage is not available"
        db_session.expire_all()
        assert db_session.get(Order, order_id).status == "pending"
        assert db_session.query(InventoryTransaction).count() == 0


# =============================================================================
# STATUS MONOTONICITY
# =============================================================================


class TestStatusTransitions:

    @pytest.fixture
    def order_id(self, client, seed, employee_headers):
        return _place(client, employee_headers, seed["beverages"]["Green Tea"].id).json["data"]["id"]

    def test_fulfilled_cannot_be_fulfilled_again(self, client, order_id, office_boy_headers):
        client.patch(f"/api/orders/{order_id}/fulfill", headers=office_boy_headers)
        resp = client.patch(f"/api/orders/{order_id}/fulfill", headers=office_boy_headers)
        assert resp.status_code == 409
        assert resp.json["message"] == "Order is already fulfilled"

    def test_fulfilled_cannot_be_cancelled(self, client, order_id, office_boy_headers):
        client.patch(f"/api/orders/{order_id}/fulfill", headers=office_boy_headers)
        resp = client.patch(f"/api/orders/{order_id}/cancel", headers=office_boy_headers)
        assert resp.status_code == 409

    def test_cancelled_cannot_be_fulfilled(self, client, seed, order_id, office_boy_headers):
        before = _stock(seed["beverages"]["Green Tea"].id)
        client.patch(f"/api/orders/{order_id}/cancel", headers=office_boy_headers)

        resp = client.put(f"/api/orders/{order_id}", json={"status": "fulfilled"}, headers=office_boy_headers)
        assert resp.status_code == 409
        assert resp.json["message"] == "Order is already cancelled"
        assert _stock(seed["beverages"]["Green Tea"].id) == before

    def test_put_status_fulfilled(self, client, order_id, office_boy_headers):
        resp = client.put(f"/api/orders/{order_id}", json={"status": "fulfilled"}, headers=office_boy_headers)
        assert resp.status_code == 200
        assert resp.json["data"]["status"] == "fulfilled"

    @pytest.mark.parametrize("status", ["pending", "brewing", None])
    def test_put_rejects_pending_and_unknown(self, client, order_id, office_boy_headers, status):
        resp = client.put(f"/api/orders/{order_id}", json={"status": status}, headers=office_boy_headers)
        assert resp.status_code == 400
        db.session.expire_all()
        assert db.session.get(Order, order_id).status == "pending"


# =============================================================================
# CANCELLATION
# =============================================================================


class TestCancelOrder:

    def test_owner_cancel_notifies_only_owner(self, client, seed, hub, employee_headers):
        ahmed = seed["users"]["ahmed"]
        office_boy = seed["users"]["officeBoy"]
        order_id = _place(client, employee_headers, seed["beverages"]["Latte"].id).json["data"]["id"]

        owner_sub = hub.subscribe(ahmed.id, ahmed.role)
        staff_sub = hub.subscribe(office_boy.id, office_boy.role)
        try:
            resp = client.patch(f"/api/orders/{order_id}/cancel", headers=employee_headers)
            owner_events = drain(owner_sub)
            staff_events = drain(staff_sub)
        finally:
            hub.unsubscribe(owner_sub)
            hub.unsubscribe(staff_sub)

        assert resp.status_code == 200
        assert resp.json["data"]["status"] == "cancelled"
        assert [e["type"] for e in owner_events] == ["order_cancelled"]
        assert staff_events == []

    def test_staff_cancel_also_tells_office_boys(self, client, seed, hub, employee_headers, admin_headers):
        office_boy = seed["users"]["officeBoy"]
        order_id = _place(client, employee_headers, seed["beverages"]["Latte"].id).json["data"]["id"]

        staff_sub = hub.subscribe(office_boy.id, office_boy.role)
        try:
            resp = client.patch(f"/api/orders/{order_id}/cancel", headers=admin_headers)
            staff_events = drain(staff_sub)
        finally:
            hub.unsubscribe(staff_sub)

        assert resp.status_code == 200
        assert len(staff_events) == 1
        assert staff_events[0]["message"] == "Order by Ahmed Hassan for Latte was cancelled"

    def test_employee_cannot_cancel_someone_elses_order(
        self, client, seed, employee_headers, other_employee_headers
    ):
        order_id = _place(client, employee_headers, seed["beverages"]["Latte"].id).json["data"]["id"]
        resp = client.patch(f"/api/orders/{order_id}/cancel", headers=other_employee_headers)
        assert resp.status_code == 403


# =============================================================================
# LISTINGS
# =============================================================================


class TestOrderListings:

    def test_my_history_only_mine(self, client, seed, employee_headers, other_employee_headers):
        _place(client, employee_headers, seed["beverages"]["Latte"].id)
        _place(client, other_employee_headers, seed["beverages"]["Latte"].id)

        resp = client.get("/api/orders/my-history", headers=employee_headers)
        assert resp.status_code == 200
        assert {o["employee"]["username"] for o in resp.json["data"]} == {"ahmed"}

    def test_my_today(self, client, seed, employee_headers):
        _place(client, employee_headers, seed["beverages"]["Latte"].id)
        resp = client.get("/api/orders/my-today", headers=employee_headers)
        assert len(resp.json["data"]) == 1

    def test_staff_list_with_status_filter(self, client, seed, employee_headers, office_boy_headers):
        first = _place(client, employee_headers, seed["beverages"]["Latte"].id).json["data"]["id"]
        _place(client, employee_headers, seed["beverages"]["Espresso"].id)
        client.patch(f"/api/orders/{first}/fulfill", headers=office_boy_headers)

        resp = client.get("/api/orders?status=pending", headers=office_boy_headers)
        assert resp.status_code == 200
        assert [o["status"] for o in resp.json["data"]] == ["pending"]

        today = client.get("/api/orders/today", headers=office_boy_headers)
        assert len(today.json["data"]) == 2

    def test_paginated_listing(self, client, seed, employee_headers, other_employee_headers, office_boy_headers):
        for headers in (employee_headers, other_employee_headers):
            for _ in range(3):
                _place(client, headers, seed["beverages"]["Latte"].id)

        resp = client.get("/api/orders?page=2&limit=4", headers=office_boy_headers)
        assert resp.status_code == 200
        assert len(resp.json["data"]) == 2
        assert resp.json["pagination"] == {
            "page": 2,
            "limit": 4,
            "totalItems": 6,
            "totalPages": 2,
            "hasNextPage": False,
            "hasPrevPage": True,
        }

        mine = client.get(
            f"/api/orders?page=1&employee_id={seed['users']['sara'].id}",
            headers=office_boy_headers,
        )
        assert mine.json["pagination"]["totalItems"] == 3

    def test_employee_cannot_list_everyone(self, client, seed, employee_headers):
        assert client.get("/api/orders", headers=employee_headers).status_code == 403

    def test_employee_reads_only_own_order(self, client, seed, employee_headers, other_employee_headers):
        order_id = _place(client, employee_headers, seed["beverages"]["Latte"].id).json["data"]["id"]

        assert client.get(f"/api/orders/{order_id}", headers=employee_headers).status_code == 200
        assert client.get(f"/api/orders/{order_id}", headers=other_employee_headers).status_code == 403

    def test_fresh_login_has_independent_session(self, client, seed):
        token = get_auth_token(client, "sara", "sara123")
        resp = client.get("/api/orders/daily-limit", headers=auth_headers(token))
        assert resp.json["data"]["ordersToday"] == 0
