"""
auth/access.py -- Authorization decisions derived from the session store.

AccessControl answers two questions and nothing else:
  is_authenticated()        -- does the session hold an Identity?
  has_any_role(allowed)     -- is the active role a member of allowed?

Membership is exact. There is no role ordering: super_admin does not satisfy
an allow-list that names only admin. Every gated surface therefore declares
the full set of roles it accepts, as the frozenset constants below do.

check() bundles both answers into an AccessDecision so consumers can render
the "authentication required" and "access denied" states without asking
twice. AccessControl itself never raises for a denial and never renders.

Layer rule: no imports from api/, listings/, or storage/.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from auth.models import Role
from auth.session import SessionStore

# ---------------------------------------------------------------------------
# Gated surfaces -- explicit allow-lists, never a minimum role
# ---------------------------------------------------------------------------

ADMIN_DASHBOARD: frozenset[Role] = frozenset({Role.admin, Role.super_admin})
SUPER_ADMIN_DASHBOARD: frozenset[Role] = frozenset({Role.super_admin})
PROPERTY_MANAGEMENT: frozenset[Role] = frozenset({Role.admin, Role.super_admin})
USER_MANAGEMENT: frozenset[Role] = frozenset({Role.super_admin})

AUTHENTICATION_REQUIRED = "authentication_required"
ACCESS_DENIED = "access_denied"


@dataclass(frozen=True)
class AccessDecision:
    granted: bool
    required_roles: tuple[Role, ...]
    actual_role: Optional[Role] = None
    reason: Optional[str] = None  # None, AUTHENTICATION_REQUIRED, ACCESS_DENIED


def _ordered(roles: frozenset[Role]) -> tuple[Role, ...]:
    # Declaration order of the enum, for stable messages.
    return tuple(r for r in Role if r in roles)


class AccessControl:
    """Read-only view over a SessionStore that reports authorization decisions."""

    def __init__(self, session: SessionStore) -> None:
        self._session = session

    def is_authenticated(self) -> bool:
        return self._session.current is not None

    def has_any_role(self, allowed_roles: Iterable[Role]) -> bool:
        """True iff authenticated and the active role is in allowed_roles.

        Raises ValueError if allowed_roles names something that is not a Role.
        """
        allowed = frozenset(Role(r) for r in allowed_roles)
        identity = self._session.current
        if identity is None:
            return False
        return identity.role in allowed

    def check(self, allowed_roles: Iterable[Role]) -> AccessDecision:
        allowed = frozenset(Role(r) for r in allowed_roles)
        required = _ordered(allowed)
        identity = self._session.current
        if identity is None:
            return AccessDecision(granted=False, required_roles=required, reason=AUTHENTICATION_REQUIRED)
        if not self.has_any_role(allowed):
            return AccessDecision(
                granted=False,
                required_roles=required,
                actual_role=identity.role,
                reason=ACCESS_DENIED,
            )
        return AccessDecision(granted=True, required_roles=required, actual_role=identity.role)
