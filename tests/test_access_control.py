"""Unit tests for auth/access.py -- exact-match role gating.

Covers:
- is_authenticated() tracks login/logout
- has_any_role(): empty allow-list, no implicit escalation, unauthenticated
- check(): both denial reasons carry the data the fallback pages show
- Declared surfaces list every accepted role explicitly
"""

from __future__ import annotations

import asyncio

import pytest

from auth.access import (
    ACCESS_DENIED,
    ADMIN_DASHBOARD,
    AUTHENTICATION_REQUIRED,
    PROPERTY_MANAGEMENT,
    SUPER_ADMIN_DASHBOARD,
    USER_MANAGEMENT,
    AccessControl,
)
from auth.models import Role
from auth.session import SessionStore


@pytest.fixture
def access(session_store: SessionStore) -> AccessControl:
    return AccessControl(session_store)


def _login(store: SessionStore, email: str) -> None:
    assert asyncio.run(store.login(email, "pw")) is True


class TestIsAuthenticated:
    def test_false_before_login(self, access: AccessControl) -> None:
        assert access.is_authenticated() is False

    def test_tracks_login_and_logout(self, access: AccessControl, session_store: SessionStore) -> None:
        _login(session_store, "visitor@demo.com")
        assert access.is_authenticated() is True
        session_store.logout()
        assert access.is_authenticated() is False


class TestHasAnyRole:
    def test_unauthenticated_is_always_false(self, access: AccessControl) -> None:
        assert access.has_any_role(set(Role)) is False

    @pytest.mark.parametrize("email", ["visitor@demo.com", "agent@demo.com", "admin@demo.com", "superadmin@demo.com"])
    def test_empty_allow_list_is_always_false(
        self, access: AccessControl, session_store: SessionStore, email: str
    ) -> None:
        _login(session_store, email)
        assert access.has_any_role([]) is False

    def test_super_admin_does_not_satisfy_admin_only(self, access: AccessControl, session_store: SessionStore) -> None:
        _login(session_store, "superadmin@demo.com")
        assert access.has_any_role(["admin"]) is False
        assert access.has_any_role({Role.admin}) is False

    def test_admin_end_to_end(self, access: AccessControl, session_store: SessionStore) -> None:
        _login(session_store, "admin@demo.com")
        assert access.is_authenticated() is True
        assert access.has_any_role(["admin", "super_admin"]) is True
        assert access.has_any_role(["super_admin"]) is False

    def test_role_change_is_reflected_immediately(self, access: AccessControl, session_store: SessionStore) -> None:
        _login(session_store, "admin@demo.com")
        asyncio.run(session_store.update_role("3", Role.agent))
        assert access.has_any_role(ADMIN_DASHBOARD) is False
        assert access.has_any_role({Role.agent}) is True

    def test_unknown_role_in_allow_list_raises(self, access: AccessControl) -> None:
        with pytest.raises(ValueError):
            access.has_any_role(["owner"])


class TestCheck:
    def test_authentication_required(self, access: AccessControl) -> None:
        decision = access.check(ADMIN_DASHBOARD)
        assert decision.granted is False
        assert decision.reason == AUTHENTICATION_REQUIRED
        assert decision.actual_role is None
        assert decision.required_roles == (Role.admin, Role.super_admin)

    def test_access_denied_names_required_and_actual_role(
        self, access: AccessControl, session_store: SessionStore
    ) -> None:
        _login(session_store, "agent@demo.com")
        decision = access.check(SUPER_ADMIN_DASHBOARD)
        assert decision.granted is False
        assert decision.reason == ACCESS_DENIED
        assert decision.required_roles == (Role.super_admin,)
        assert decision.actual_role is Role.agent

    def test_granted(self, access: AccessControl, session_store: SessionStore) -> None:
        _login(session_store, "superadmin@demo.com")
        decision = access.check(SUPER_ADMIN_DASHBOARD)
        assert decision.granted is True
        assert decision.reason is None
        assert decision.actual_role is Role.super_admin


class TestSurfaces:
    def test_admin_surfaces_list_super_admin_explicitly(self) -> None:
        assert ADMIN_DASHBOARD == {Role.admin, Role.super_admin}
        assert PROPERTY_MANAGEMENT == {Role.admin, Role.super_admin}

    def test_super_admin_surfaces(self) -> None:
        assert SUPER_ADMIN_DASHBOARD == {Role.super_admin}
        assert USER_MANAGEMENT == {Role.super_admin}
