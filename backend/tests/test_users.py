"""
User administration tests (admin only).
"""

import pytest

from conftest import auth_headers, get_auth_token
from office_beverages.models import Order, User, UserSession


def _new_user(**overrides):
    body = {
        "username": "omar",
        "password": "omar1234",
        "full_name": "Omar Khaled",
        "email": "Omar@Company.com",
        "department": "Finance",
    }
    body.update(overrides)
    return body


class TestCreateUser:

    def test_create_employee_by_default(self, client, seed, admin_headers):
        resp = client.post("/api/users", json=_new_user(), headers=admin_headers)

        assert resp.status_code == 201
        data = resp.json["data"]
        assert data["role"] == "employee"
        assert data["email"] == "omar@company.com"
        assert "password" not in data
        assert "password_hash" not in data

        assert get_auth_token(client, "omar", "omar1234") is not None

    def test_duplicate_username_409(self, client, seed, admin_headers):
        resp = client.post("/api/users", json=_new_user(username="ahmed"), headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json["message"] == "Username already exists"

    def test_duplicate_email_case_insensitive_409(self, client, seed, admin_headers):
        resp = client.post("/api/users", json=_new_user(email="SARA@company.com"), headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json["message"] == "Email already exists"

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"username": "om"}, "username"),
            ({"password": "123"}, "password"),
            ({"email": "not-an-email"}, "email"),
            ({"role": "barista"}, "role"),
            ({"work_start_time": "25:00"}, "work_start_time"),
        ],
    )
    def test_validation(self, client, seed, admin_headers, overrides, field):
        resp = client.post("/api/users", json=_new_user(**overrides), headers=admin_headers)
        assert resp.status_code == 400
        assert field in {e["field"] for e in resp.json["errors"]}

    def test_missing_required_fields(self, client, seed, admin_headers):
        resp = client.post("/api/users", json={}, headers=admin_headers)
        assert resp.status_code == 400
        fields = {e["field"] for e in resp.json["errors"]}
        assert {"username", "password", "full_name", "email"} <= fields


class TestReadUsers:

    def test_list_filtered_by_role(self, client, seed, admin_headers):
        resp = client.get("/api/users?role=employee", headers=admin_headers)
        assert {u["username"] for u in resp.json["data"]} == {"ahmed", "sara"}

    def test_paginated(self, client, seed, admin_headers):
        resp = client.get("/api/users?page=1&limit=3", headers=admin_headers)
        assert len(resp.json["data"]) == 3
        assert resp.json["pagination"]["totalItems"] == 4
        assert resp.json["pagination"]["hasNextPage"] is True

    def test_search(self, client, seed, admin_headers):
        resp = client.get("/api/users/search?q=hass", headers=admin_headers)
        assert [u["username"] for u in resp.json["data"]] == ["ahmed"]

    def test_get_missing_404(self, client, seed, admin_headers):
        resp = client.get("/api/users/99999", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json["message"] == "User not found"


class TestUpdateUser:

    def test_update_fields(self, client, seed, admin_headers):
        sara = seed["users"]["sara"]
        resp = client.put(f"/api/users/{sara.id}", json={"department": "Ops", "role": "office_boy"},
                          headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["data"]["department"] == "Ops"
        assert resp.json["data"]["role"] == "office_boy"

    def test_rename_to_taken_username_409(self, client, seed, admin_headers):
        sara = seed["users"]["sara"]
        resp = client.put(f"/api/users/{sara.id}", json={"username": "ahmed"}, headers=admin_headers)
        assert resp.status_code == 409

    def test_password_change(self, client, seed, admin_headers):
        sara = seed["users"]["sara"]
        client.put(f"/api/users/{sara.id}", json={"password": "newpass99"}, headers=admin_headers)

        assert get_auth_token(client, "sara", "sara123") is None
        assert get_auth_token(client, "sara", "newpass99") is not None

    def test_deactivation_ends_sessions(self, client, db_session, seed, admin_headers):
        sara = seed["users"]["sara"]
        token = get_auth_token(client, "sara", "sara123")

        resp = client.put(f"/api/users/{sara.id}", json={"is_active": False}, headers=admin_headers)
        assert resp.status_code == 200

        db_session.expire_all()
        row = db_session.query(UserSession).filter_by(user_id=sara.id).one()
        assert row.is_active is False
        assert row.end_reason == "User account deactivated"
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401


class TestDeleteUser:

    def test_delete(self, client, db_session, seed, admin_headers):
        sara = seed["users"]["sara"]
        resp = client.delete(f"/api/users/{sara.id}", headers=admin_headers)
        assert resp.status_code == 200

        db_session.expire_all()
        assert db_session.query(User).filter_by(username="sara").first() is None

    def test_delete_keeps_order_history(
        self, client, db_session, seed, admin_headers, other_employee_headers, office_boy_headers
    ):
        sara = seed["users"]["sara"]
        espresso = seed["beverages"]["Espresso"]
        order_id = client.post(
            "/api/orders", json={"beverage_id": espresso.id}, headers=other_employee_headers
        ).json["data"]["id"]
        client.patch(f"/api/orders/{order_id}/fulfill", headers=office_boy_headers)

        resp = client.delete(f"/api/users/{sara.id}", headers=admin_headers)
        assert resp.status_code == 200

        db_session.expire_all()
        order = db_session.get(Order, order_id)
        assert order is not None
        assert order.employee_id is None
        assert order.status == "fulfilled"

        dashboard = client.get("/api/reports/dashboard", headers=admin_headers)
        assert dashboard.json["data"]["dailyOrdersCount"] == 1

    def test_cannot_delete_self(self, client, seed, admin_headers):
        admin = seed["users"]["admin"]
        resp = client.delete(f"/api/users/{admin.id}", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "You cannot delete your own account"

    def test_delete_missing_404(self, client, seed, admin_headers):
        assert client.delete("/api/users/99999", headers=admin_headers).status_code == 404
