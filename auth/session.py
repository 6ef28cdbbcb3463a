"""
auth/session.py -- The session store: zero-or-one active Identity.

Lifecycle:
  initialize()   -- adopt the durable record written by a previous process,
                    or drop it if it no longer parses as an Identity.
  login()        -- coroutine; resolves an account and persists it.
  logout()       -- synchronous; clears memory and the durable record.
  update_role()  -- coroutine; replaces the active role if the id matches.

Consistency: every write hits storage before the in-memory reference changes.
If storage raises, the exception propagates and the in-memory Identity is
left as it was, so memory and storage never diverge once a call returns.

Concurrency: login() and update_role() suspend on asyncio.sleep to stand in
for backend latency. The store does not serialize overlapping calls; callers
own that guard (see api/routes/v1/auth.py).

Layer rule: no imports from api/ or listings/.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from auth.directory import DEMO_ACCOUNTS, find_account, synthesize_identity
from auth.models import Identity, Role
from core.config import get_settings
from storage.store import LocalStorage

logger = logging.getLogger("peanech.auth")


class SessionStore:
    """Owns the current authenticated Identity and its durable snapshot.

    Usage:
        store = SessionStore(LocalStorage())
        store.initialize()
        ok = await store.login("admin@demo.com", "anything")
        store.current.role      # Role.admin
        store.logout()
    """

    def __init__(
        self,
        storage: LocalStorage,
        *,
        storage_key: Optional[str] = None,
        accounts: tuple[Identity, ...] = DEMO_ACCOUNTS,
        login_delay: Optional[float] = None,
        role_update_delay: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self._storage = storage
        self._key = storage_key or settings.session_storage_key
        self._accounts = accounts
        self._login_delay = settings.login_delay_seconds if login_delay is None else login_delay
        self._role_update_delay = settings.role_update_delay_seconds if role_update_delay is None else role_update_delay
        self._current: Optional[Identity] = None

    @property
    def current(self) -> Optional[Identity]:
        """The active Identity, or None when logged out."""
        return self._current

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> Optional[Identity]:
        """Rehydrate the session from durable storage.

        A record that fails to decode or validate is removed and logged; the
        session then starts empty. Never raises for bad data.
        """
        raw = self._storage.get_item(self._key)
        if raw is None:
            self._current = None
            return None
        try:
            identity = Identity.from_dict(json.loads(raw))
        except (ValueError, RecursionError) as exc:  # deeply nested JSON recurses
            logger.warning("Discarding corrupt session record under %r: %s", self._key, exc)
            self._storage.remove_item(self._key)
            self._current = None
            return None
        self._current = identity
        logger.info("Restored session for %s (%s)", identity.email, identity.role.value)
        return identity

    async def login(self, email: str, password: str, role: Optional[Role] = None) -> bool:
        """Sign in as a known account, or as a synthesized one when role is given.

        The password is accepted but not checked against anything. Returns
        False, leaving the session untouched, when the email is unknown and no
        role was supplied.
        """
        await asyncio.sleep(self._login_delay)

        identity = find_account(email, self._accounts)
        if identity is None and role is not None:
            identity = synthesize_identity(email, Role(role))
        if identity is None:
            logger.info("Login rejected for unknown account")
            return False

        self._persist(identity)
        self._current = identity
        logger.info("Logged in %s as %s", identity.email, identity.role.value)
        return True

    def logout(self) -> None:
        """Clear the session. Safe to call when already logged out."""
        self._storage.remove_item(self._key)
        if self._current is not None:
            logger.info("Logged out %s", self._current.email)
        self._current = None

    async def update_role(self, identity_id: str, new_role: Role) -> bool:
        """Replace the role of the account with identity_id.

        Only the active Identity is changed locally. For any other id the
        call still reports success: the account record it would update lives
        outside this store.
        """
        new_role = Role(new_role)
        await asyncio.sleep(self._role_update_delay)

        if self._current is not None and self._current.id == identity_id:
            updated = self._current.with_role(new_role)
            self._persist(updated)
            self._current = updated
            logger.info("Active session role changed to %s", new_role.value)
        else:
            logger.info("Role update for user %s does not touch the active session", identity_id)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(self, identity: Identity) -> None:
        self._storage.set_item(self._key, json.dumps(identity.to_dict()))
