"""
Authorization tests for Sellespro.

Verifies:
- Unauthenticated requests return 401
- Cashier role denied manager-only operations (403)
- Cashiers must hold the active shift before selling or browsing stock (409)
- Manager role can perform privileged operations
"""

import pytest

from conftest import login, login_cashier, login_manager


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a logged-in operator."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("POST", "/api/auth/logout"),
            ("GET", "/api/products"),
            ("POST", "/api/products"),
            ("GET", "/api/sales"),
            ("POST", "/api/sales"),
            ("GET", "/api/shifts/active"),
            ("POST", "/api/shifts/activate"),
            ("GET", "/api/shifts"),
            ("GET", "/api/reports/summary"),
            ("GET", "/api/reports/dashboard"),
            ("GET", "/api/reports/insights"),
            ("GET", "/api/users"),
            ("POST", "/api/users"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_health_is_public(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"
        assert resp.json["state"]["products"] == 3


# =============================================================================
# LOGIN / SESSION
# =============================================================================


class TestLogin:

    def test_bad_credentials_are_generic(self, client):
        resp = login(client, "cashier1", "wrong")
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid credentials"

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/login", json={"username": "admin"})
        assert resp.status_code == 400

    @pytest.mark.parametrize("password", [12345, ["password"], {"p": "password"}])
    def test_non_string_password_is_bad_credentials(self, client, password):
        resp = client.post("/api/auth/login", json={"username": "admin", "password": password})
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid credentials"

    def test_cashier_login_requires_shift(self, client):
        resp = login(client, "cashier1")
        assert resp.status_code == 200
        assert resp.json["user"]["role"] == "USER"
        assert resp.json["shift_required"] is True
        assert "passwordHash" not in resp.json["user"]

    def test_manager_login_never_requires_shift(self, client):
        resp = login(client, "admin")
        assert resp.json["user"]["role"] == "MANAGER"
        assert resp.json["shift_required"] is False

    def test_logout_clears_session(self, client):
        login_manager(client)
        assert client.post("/api/auth/logout").status_code == 200
        assert client.get("/api/auth/me").status_code == 401

    def test_logout_keeps_active_shift(self, client):
        login_cashier(client)
        client.post("/api/auth/logout")
        login_manager(client)
        resp = client.get("/api/shifts/active")
        assert resp.json["shift"]["type"] == "A"

    def test_new_login_replaces_session(self, client):
        login_manager(client)
        login(client, "cashier1")
        assert client.get("/api/auth/me").json["user"]["username"] == "cashier1"


# =============================================================================
# CASHIER DENIED MANAGER OPERATIONS (403)
# =============================================================================


class TestCashierDenied:
    """Cashier role cannot manage catalog, staff, or view insights."""

    @pytest.fixture(autouse=True)
    def _cashier(self, client):
        login_cashier(client)

    def test_cannot_create_product(self, client):
        resp = client.post("/api/products", json={"name": "X", "localCode": "X1"})
        assert resp.status_code == 403
        assert resp.json["required_roles"] == ["MANAGER"]

    def test_cannot_restock(self, client):
        assert client.post("/api/products/1/restock", json={"amount": 5}).status_code == 403

    def test_cannot_delete_product(self, client):
        assert client.delete("/api/products/1").status_code == 403

    def test_cannot_list_users(self, client):
        assert client.get("/api/users").status_code == 403

    def test_cannot_create_user(self, client):
        resp = client.post("/api/users", json={"username": "x", "password": "y"})
        assert resp.status_code == 403

    def test_cannot_view_insights(self, client):
        assert client.get("/api/reports/insights").status_code == 403

    def test_cannot_view_shift_history(self, client):
        assert client.get("/api/shifts").status_code == 403


# =============================================================================
# SHIFT GATE (409)
# =============================================================================


class TestShiftGate:

    def test_cashier_without_shift_cannot_browse_or_sell(self, client):
        login_cashier(client, activate=None)

        resp = client.get("/api/products")
        assert resp.status_code == 409
        assert resp.json["shift_required"] is True

        resp = client.post("/api/sales", json={"items": [{"product_id": "2", "quantity": 1}]})
        assert resp.status_code == 409

    def test_cashier_with_shift_can_browse(self, client):
        login_cashier(client)
        resp = client.get("/api/products")
        assert resp.status_code == 200
        assert resp.json["count"] == 3

    def test_manager_can_browse_without_shift(self, client):
        login_manager(client)
        assert client.get("/api/products").status_code == 200

    def test_double_activation_conflicts(self, client):
        login_cashier(client)
        resp = client.post("/api/shifts/activate", json={"type": "B"})
        assert resp.status_code == 409
        assert client.get("/api/shifts/active").json["shift"]["type"] == "A"

    def test_deactivate_and_history(self, client):
        login_cashier(client)
        shift_id = client.get("/api/shifts/active").json["shift"]["id"]

        resp = client.post(f"/api/shifts/{shift_id}/deactivate")
        assert resp.status_code == 200
        assert resp.json["shift"]["isActive"] is False

        resp = client.post(f"/api/shifts/{shift_id}/deactivate")
        assert resp.status_code == 409

        login_manager(client)
        history = client.get("/api/shifts").json["shifts"]
        assert [s["id"] for s in history] == [shift_id]

    def test_activation_requires_type(self, client):
        login_cashier(client, activate=None)
        assert client.post("/api/shifts/activate", json={}).status_code == 400
        assert client.post("/api/shifts/activate", json={"type": "Z"}).status_code == 400
