"""
tests/conftest.py -- Shared test fixtures for PeanechEstate.

This module provides:
  - storage / session_store: isolated file-backed stores per test
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient over the real app with an isolated session store

Design: each test gets its own SQLite file under tmp_path. A file (rather
than :memory:) is required because TestClient runs sync route handlers in a
thread pool, and because reopening the same file is how the tests simulate a
page reload.

The latency and rate-limit env vars must be set before any auth/api import:
get_settings() is cached on first call and the login rate limit is read when
api/routes/v1/auth.py is imported.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from pathlib import Path

# CRITICAL: set before any core/auth/api import.
os.environ.setdefault("LOGIN_DELAY_SECONDS", "0")
os.environ.setdefault("ROLE_UPDATE_DELAY_SECONDS", "0")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes.v1.auth import SessionOperationGuard
from auth.directory import UserRoster
from auth.session import SessionStore
from listings.catalog import PropertyCatalog
from storage.store import LocalStorage


def storage_url(path: Path) -> str:
    return f"sqlite:///{path / 'storage.db'}"


@pytest.fixture
def storage(tmp_path: Path) -> Generator[LocalStorage, None, None]:
    s = LocalStorage(storage_url(tmp_path))
    yield s
    s.close()


@pytest.fixture
def session_store(storage: LocalStorage) -> SessionStore:
    store = SessionStore(storage, login_delay=0, role_update_delay=0)
    store.initialize()
    return store


def _patch_lifespan(storage: LocalStorage):
    """Return an async context manager that replaces the real lifespan.

    Mirrors api.main.lifespan but uses the test's storage so nothing touches
    the developer's peanech_storage.db.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.storage = storage
        app.state.session_store = SessionStore(storage, login_delay=0, role_update_delay=0)
        app.state.session_store.initialize()
        app.state.session_guard = SessionOperationGuard()
        app.state.catalog = PropertyCatalog()
        app.state.roster = UserRoster()
        yield

    return test_lifespan


@pytest.fixture
def api_client(storage: LocalStorage) -> Generator[TestClient, None, None]:
    """Yield a TestClient with a fresh, signed-out session."""
    original = app.router.lifespan_context
    app.router.lifespan_context = _patch_lifespan(storage)
    try:
        with TestClient(app, raise_server_exceptions=True) as client:
            yield client
    finally:
        app.router.lifespan_context = original


@pytest.fixture
def login_as(api_client: TestClient):
    """Return a helper that signs the client in and returns the identity JSON."""

    def _login(email: str, **extra) -> dict:
        resp = api_client.post("/api/v1/auth/login", json={"email": email, "password": "whatever", **extra})
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _login
