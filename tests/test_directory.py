"""Unit tests for auth/directory.py -- demo account lookup and the user roster."""

from __future__ import annotations

from auth.directory import DEMO_ACCOUNTS, UserRoster, find_account, synthesize_identity
from auth.models import Identity, Role


class TestAccounts:
    def test_find_account(self) -> None:
        assert find_account("agent@demo.com").role is Role.agent
        assert find_account("agent@demo.co") is None

    def test_demo_ids_are_unique(self) -> None:
        assert len({a.id for a in DEMO_ACCOUNTS}) == len(DEMO_ACCOUNTS)

    def test_synthesize_identity_is_deterministic_given_clock(self) -> None:
        identity = synthesize_identity("mary@example.com", Role.visitor, now_ms=1700000000000)
        assert identity == Identity(id="1700000000000", email="mary@example.com", name="mary", role=Role.visitor)

    def test_synthesize_identity_without_at_sign(self) -> None:
        assert synthesize_identity("localonly", Role.agent, now_ms=1).name == "localonly"


class TestUserRoster:
    def test_role_change_and_counts(self) -> None:
        roster = UserRoster()
        assert roster.role_counts() == {"visitor": 2, "agent": 1, "admin": 1, "super_admin": 1}
        roster.set_role("5", Role.agent)
        assert roster.get("5").role is Role.agent
        assert roster.role_counts()["agent"] == 2
        assert roster.set_role("99", Role.agent) is None

    def test_role_change_does_not_touch_demo_accounts(self) -> None:
        UserRoster().set_role("3", Role.visitor)
        assert find_account("admin@demo.com").role is Role.admin

    def test_toggle_status(self) -> None:
        roster = UserRoster()
        assert roster.toggle_status("2").status == "suspended"
        assert roster.toggle_status("2").status == "active"
        assert roster.toggle_status("99") is None
