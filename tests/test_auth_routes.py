"""
tests/test_auth_routes.py -- Integration tests for the session endpoints.

These tests exercise the full stack: FastAPI routing -> dependency injection
-> SessionStore/AccessControl -> response model serialization.

Coverage:
  - login/me/logout round trip, including the durable record
  - generic 401 on login failure
  - 401 vs 403 error envelopes from gated routes
  - /auth/access decisions and /navigation visibility per role
  - 409 while another session operation is in progress
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from auth.session import SessionStore
from storage.store import LocalStorage


class TestLoginLogout:
    def test_login_returns_identity(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/auth/login", json={"email": "admin@demo.com", "password": "x"})
        assert resp.status_code == 200
        assert resp.json() == {"id": "3", "email": "admin@demo.com", "name": "Demo Admin", "role": "admin"}
        assert resp.headers["Cache-Control"] == "no-store"

    def test_login_writes_durable_record(self, api_client: TestClient, storage: LocalStorage, login_as) -> None:
        login_as("agent@demo.com")
        assert json.loads(storage.get_item("auth_user"))["role"] == "agent"

    def test_login_unknown_email_is_generic_401(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "x"})
        assert resp.status_code == 401
        error = resp.json()["error"]
        assert error["code"] == "login_failed"
        assert "password" not in error["message"].lower()
        assert "email" not in error["message"].lower()

    def test_login_with_role_creates_account(self, api_client: TestClient, login_as) -> None:
        data = login_as("pat@example.com", role="agent")
        assert data["name"] == "pat"
        assert data["role"] == "agent"

    def test_login_rejects_unknown_role(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/auth/login", json={"email": "pat@example.com", "role": "owner"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    def test_me_requires_auth(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "auth_required"

    def test_me_after_login(self, api_client: TestClient, login_as) -> None:
        login_as("visitor@demo.com")
        resp = api_client.get("/api/v1/auth/me")
        assert resp.status_code == 200
        assert resp.json()["role"] == "visitor"

    def test_logout_clears_session_and_record(self, api_client: TestClient, storage: LocalStorage, login_as) -> None:
        login_as("admin@demo.com")
        resp = api_client.post("/api/v1/auth/logout")
        assert resp.status_code == 200
        assert api_client.get("/api/v1/auth/me").status_code == 401
        assert storage.get_item("auth_user") is None

        reloaded = SessionStore(storage)
        reloaded.initialize()
        assert reloaded.current is None

    def test_logout_when_signed_out(self, api_client: TestClient) -> None:
        assert api_client.post("/api/v1/auth/logout").status_code == 200


class TestRestoreOnStartup:
    def test_previous_session_is_restored(self, storage: LocalStorage, api_client: TestClient) -> None:
        # api_client already started; restart the app over the same storage.
        api_client.post("/api/v1/auth/login", json={"email": "superadmin@demo.com"})
        with TestClient(api_client.app) as restarted:
            assert restarted.get("/api/v1/auth/me").json()["role"] == "super_admin"

    @pytest.mark.parametrize("raw", ["{broken", "[" * 100_000], ids=["truncated", "deeply-nested"])
    def test_corrupt_record_starts_signed_out(self, storage: LocalStorage, api_client: TestClient, raw: str) -> None:
        storage.set_item("auth_user", raw)
        with TestClient(api_client.app) as restarted:
            assert restarted.get("/api/v1/auth/me").status_code == 401
        assert storage.get_item("auth_user") is None


class TestAccessEndpoint:
    def test_unauthenticated(self, api_client: TestClient) -> None:
        data = api_client.get("/api/v1/auth/access", params={"roles": ["admin"]}).json()
        assert data["authenticated"] is False
        assert data["granted"] is False
        assert data["reason"] == "authentication_required"

    def test_no_escalation_for_super_admin(self, api_client: TestClient, login_as) -> None:
        login_as("superadmin@demo.com")
        data = api_client.get("/api/v1/auth/access", params={"roles": ["admin"]}).json()
        assert data["granted"] is False
        assert data["reason"] == "access_denied"
        assert data["role"] == "super_admin"
        assert data["required_roles"] == ["admin"]

    def test_empty_allow_list(self, api_client: TestClient, login_as) -> None:
        login_as("superadmin@demo.com")
        data = api_client.get("/api/v1/auth/access").json()
        assert data["granted"] is False

    def test_admin_granted(self, api_client: TestClient, login_as) -> None:
        login_as("admin@demo.com")
        data = api_client.get("/api/v1/auth/access", params={"roles": ["admin", "super_admin"]}).json()
        assert data["granted"] is True
        assert data["reason"] is None


class TestGateEnvelopes:
    def test_unauthenticated_gets_401(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/dashboard/admin")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "auth_required"

    def test_wrong_role_gets_403_with_roles(self, api_client: TestClient, login_as) -> None:
        login_as("agent@demo.com")
        resp = api_client.get("/api/v1/dashboard/admin")
        assert resp.status_code == 403
        error = resp.json()["error"]
        assert error["code"] == "access_denied"
        assert error["required_roles"] == ["admin", "super_admin"]
        assert error["role"] == "agent"
        assert "Your current role: agent" in error["message"]


@pytest.mark.parametrize(
    ("email", "expected_extra"),
    [
        (None, []),
        ("visitor@demo.com", []),
        ("agent@demo.com", []),
        ("admin@demo.com", ["Admin"]),
        ("superadmin@demo.com", ["Admin", "Super Admin"]),
    ],
)
def test_navigation_links_per_role(api_client: TestClient, login_as, email, expected_extra) -> None:
    if email:
        login_as(email)
    labels = [link["label"] for link in api_client.get("/api/v1/navigation").json()]
    assert labels == ["Home", "Properties", "Agents", "Pricing", "Contact", *expected_extra]


class TestSingleFlight:
    def test_login_rejected_while_operation_pending(self, api_client: TestClient) -> None:
        api_client.app.state.session_guard.busy = True
        try:
            resp = api_client.post("/api/v1/auth/login", json={"email": "admin@demo.com"})
        finally:
            api_client.app.state.session_guard.busy = False
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "operation_in_progress"
        assert api_client.get("/api/v1/auth/me").status_code == 401

    def test_logout_rejected_while_operation_pending(self, api_client: TestClient, login_as) -> None:
        login_as("admin@demo.com")
        api_client.app.state.session_guard.busy = True
        try:
            assert api_client.post("/api/v1/auth/logout").status_code == 409
        finally:
            api_client.app.state.session_guard.busy = False
        assert api_client.get("/api/v1/auth/me").status_code == 200

    def test_guard_released_after_failed_login(self, api_client: TestClient) -> None:
        api_client.post("/api/v1/auth/login", json={"email": "nobody@example.com"})
        assert api_client.app.state.session_guard.busy is False

    def test_role_change_rejected_while_operation_pending(self, api_client: TestClient, login_as) -> None:
        login_as("superadmin@demo.com")
        api_client.app.state.session_guard.busy = True
        try:
            resp = api_client.patch("/api/v1/users/4/role", json={"role": "visitor"})
        finally:
            api_client.app.state.session_guard.busy = False
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "operation_in_progress"
        assert api_client.get("/api/v1/auth/me").json()["role"] == "super_admin"
        assert api_client.app.state.roster.get("4").role.value == "super_admin"

    def test_guard_released_after_role_change(self, api_client: TestClient, login_as) -> None:
        login_as("superadmin@demo.com")
        assert api_client.patch("/api/v1/users/5/role", json={"role": "agent"}).status_code == 200
        assert api_client.app.state.session_guard.busy is False
        assert api_client.post("/api/v1/auth/logout").status_code == 200
