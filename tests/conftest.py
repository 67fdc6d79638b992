"""
tests/conftest.py -- Shared test fixtures for TaskTrack.

This module provides:
  - _make_test_stores(): isolated in-memory DBs for users + tasks
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - client: TestClient against the real app with an empty cookie jar per test
  - csrf_headers: fetches a CSRF token and returns the header dict to send
  - signed_in: a freshly registered and logged-in account on `client`

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.

DEBUG and SECURE_COOKIES must be set before any auth/core import:
  DEBUG=true           get_settings() auto-generates both keys instead of raising.
  SECURE_COOKIES=false TestClient talks plain http://testserver, and the cookie
                       jar will not send Secure cookies over http.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SECURE_COOKIES", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.csrf import CSRF_HEADER
from auth.store import UserStore
from tasks.store import TaskStore

TEST_PASSWORD = "pw12345"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, TaskStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_tasktrack_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(url), TaskStore(url)


def _patch_lifespan(user_store: UserStore, task_store: TaskStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.task_store = task_store
        yield

    return test_lifespan


def unique_email() -> str:
    return f"user-{uuid.uuid4().hex[:12]}@example.com"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store(tmp_path) -> Generator[UserStore, None, None]:
    """A file-backed UserStore private to one test."""
    store = UserStore(f"sqlite:///{tmp_path / 'auth.db'}")
    yield store
    store.close()


@pytest.fixture
def task_store(tmp_path) -> Generator[TaskStore, None, None]:
    store = TaskStore(f"sqlite:///{tmp_path / 'tasks.db'}")
    yield store
    store.close()


@pytest.fixture(scope="module")
def _module_client(request) -> Generator[TestClient, None, None]:
    """One TestClient per test module for speed, backed by that module's own DB."""
    user_store, task_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])
    app.router.lifespan_context = _patch_lifespan(user_store, task_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    task_store.close()
    user_store.close()


@pytest.fixture
def client(_module_client: TestClient) -> TestClient:
    """The module's TestClient with no cookies left over from earlier tests."""
    _module_client.cookies.clear()
    return _module_client


@pytest.fixture
def csrf_headers(client: TestClient) -> Callable[[], dict[str, str]]:
    """Return a function that seeds the _csrf cookie and yields the header to echo."""

    def _fetch() -> dict[str, str]:
        resp = client.get("/auth/csrf")
        assert resp.status_code == 200, resp.text
        return {CSRF_HEADER: resp.json()["csrfToken"]}

    return _fetch


@pytest.fixture
def signed_in(client: TestClient, csrf_headers) -> tuple[str, dict[str, str]]:
    """Register and log in a fresh account on `client`.

    Returns (email, headers) where headers carries a valid CSRF token. The
    session and CSRF cookies are in client.cookies.
    """
    email = unique_email()
    headers = csrf_headers()
    resp = client.post("/auth/signup", json={"email": email, "password": TEST_PASSWORD}, headers=headers)
    assert resp.status_code == 201, resp.text
    resp = client.post("/auth/login", json={"email": email, "password": TEST_PASSWORD}, headers=headers)
    assert resp.status_code == 200, resp.text
    return email, headers


@pytest.fixture
def email() -> str:
    """An address no other test has registered."""
    return unique_email()
