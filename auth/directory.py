"""
auth/directory.py -- Known demo accounts and the user roster.

DEMO_ACCOUNTS is the fixed account set login() resolves emails against. No
external account service is consulted; swapping this lookup for a verified
credential check would not change the session contract.

UserRoster is the user list the super-admin dashboard manages. It is seeded
from the demo accounts and is deliberately separate from DEMO_ACCOUNTS:
editing a roster entry does not change which role a later login receives.

Layer rule: no imports from api/, listings/, or storage/.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Optional

from auth.models import Identity, Role

DEMO_ACCOUNTS: tuple[Identity, ...] = (
    Identity(id="1", email="visitor@demo.com", name="Demo Visitor", role=Role.visitor),
    Identity(id="2", email="agent@demo.com", name="Demo Agent", role=Role.agent),
    Identity(id="3", email="admin@demo.com", name="Demo Admin", role=Role.admin),
    Identity(id="4", email="superadmin@demo.com", name="Demo Super Admin", role=Role.super_admin),
)


def find_account(email: str, accounts: tuple[Identity, ...] = DEMO_ACCOUNTS) -> Optional[Identity]:
    """Exact, case-sensitive email match. Returns None if no account matches."""
    for account in accounts:
        if account.email == email:
            return account
    return None


def synthesize_identity(email: str, role: Role, now_ms: Optional[int] = None) -> Identity:
    """Create an ad hoc account for an unknown email.

    The id is the current epoch time in milliseconds and the display name is
    the local part of the email (everything before the first '@').
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return Identity(id=str(now_ms), email=email, name=email.split("@")[0], role=Role(role))


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------


@dataclass
class RosterEntry:
    id: str
    email: str
    name: str
    role: Role
    created_at: str
    last_login: str
    status: str = "active"  # "active", "inactive", "suspended"


def _seed_roster() -> list[RosterEntry]:
    dates = {
        "1": ("2024-01-15", "2024-01-20"),
        "2": ("2024-01-10", "2024-01-19"),
        "3": ("2024-01-05", "2024-01-21"),
        "4": ("2024-01-01", "2024-01-21"),
    }
    entries = [
        RosterEntry(
            id=a.id,
            email=a.email,
            name=a.name,
            role=a.role,
            created_at=dates[a.id][0],
            last_login=dates[a.id][1],
        )
        for a in DEMO_ACCOUNTS
    ]
    entries.append(
        RosterEntry(
            id="5",
            email="john.doe@example.com",
            name="John Doe",
            role=Role.visitor,
            created_at="2024-01-18",
            last_login="2024-01-20",
        )
    )
    return entries


class UserRoster:
    """In-memory user list backing the super-admin dashboard.

    Usage:
        roster = UserRoster()
        roster.set_role("5", Role.agent)
        roster.role_counts()   # {"visitor": 1, "agent": 2, ...}
    """

    def __init__(self, entries: Optional[list[RosterEntry]] = None) -> None:
        self._entries: list[RosterEntry] = entries if entries is not None else _seed_roster()

    def list_users(self) -> list[RosterEntry]:
        return list(self._entries)

    def get(self, user_id: str) -> Optional[RosterEntry]:
        for entry in self._entries:
            if entry.id == user_id:
                return entry
        return None

    def set_role(self, user_id: str, role: Role) -> Optional[RosterEntry]:
        """Replace an entry's role. Returns the updated entry, or None if not found."""
        return self._update(user_id, role=Role(role))

    def toggle_status(self, user_id: str) -> Optional[RosterEntry]:
        """Flip active <-> suspended. Any other status becomes active."""
        entry = self.get(user_id)
        if entry is None:
            return None
        return self._update(user_id, status="suspended" if entry.status == "active" else "active")

    def role_counts(self) -> dict[str, int]:
        counts = {role.value: 0 for role in Role}
        for entry in self._entries:
            counts[entry.role.value] += 1
        return counts

    def _update(self, user_id: str, **fields) -> Optional[RosterEntry]:
        for i, entry in enumerate(self._entries):
            if entry.id == user_id:
                self._entries[i] = replace(entry, **fields)
                return self._entries[i]
        return None
