"""
tests/conftest.py -- Shared test fixtures for ShopAdmin tests.

This module provides:
  - _make_test_engine(): an isolated in-memory database per test module
  - _patch_lifespan(): wires that engine into app.state via init_state(),
    bypassing the real startup
  - api_client: TestClient over the real app with a patched lifespan
  - make_session: creates a user with a given role and returns a cookie header
  - admin_headers / viewer_headers: ready-made sessions for the common roles
  - store_engine: a private in-memory engine for store unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

Environment variables must be set before any api/auth/core import:
  DEBUG=true               -- get_settings() generates SECRET_KEY instead of raising
  RATE_LIMIT_ENABLED=false -- login/register tests must not trip the limiter
  ALLOWED_HOSTS            -- TestClient sends Host: testserver
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app, init_state
from auth.cookies import SESSION_COOKIE
from auth.models import User
from auth.passwords import hash_password
from core.config import get_settings
from core.database import create_db_engine

# ---------------------------------------------------------------------------
# Engine helpers
# ---------------------------------------------------------------------------


def _make_test_engine(db_suffix: str) -> Engine:
    """Create an engine on a named shared-memory SQLite database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (the module name is used).
    """
    return create_db_engine(f"sqlite:///file:test_shop_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(engine: Engine):
    """Return an async context manager that replaces the real lifespan.

    Runs the production init_state() against the test engine so routes see
    the same collaborators they would in production, seeded default roles
    included.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        init_state(app, get_settings(), engine)
        yield

    return test_lifespan


def cookie_header(token: str) -> dict[str, str]:
    return {"Cookie": f"{SESSION_COOKIE}={token}"}


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app backed by an isolated database.

    Tests hit real route handlers, middleware and exception handlers; only
    the database is swapped.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    engine = _make_test_engine(suffix)
    app.router.lifespan_context = _patch_lifespan(engine)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    engine.dispose()


@pytest.fixture(scope="module")
def make_session(api_client: TestClient) -> Callable[..., tuple[int, dict[str, str]]]:
    """Return a factory: make_session(role_name, email) -> (user_id, cookie headers).

    The user is written straight to the store and the token issued by the
    app's own TokenCodec, so these sessions do not depend on /auth/login.
    """

    def _make(role_name: str, email: str, password: str = "secret-pass-1") -> tuple[int, dict[str, str]]:
        state = api_client.app.state
        role = state.user_store.get_role_by_name(role_name)
        uid = state.user_store.create_user(
            User(
                first_name=role_name.title(),
                last_name="Tester",
                email=email,
                role_id=role.id,
                hashed_password=hash_password(password),
            )
        )
        token = state.token_codec.issue(str(uid)).token
        return uid, cookie_header(token)

    return _make


@pytest.fixture(scope="module")
def admin_headers(make_session) -> tuple[int, dict[str, str]]:
    return make_session("admin", "admin@example.com")


@pytest.fixture(scope="module")
def viewer_headers(make_session) -> tuple[int, dict[str, str]]:
    return make_session("viewer", "viewer@example.com")


@pytest.fixture
def store_engine() -> Generator[Engine, None, None]:
    """Private in-memory engine for store unit tests. Single-threaded use only."""
    engine = create_db_engine("sqlite:///:memory:")
    yield engine
    engine.dispose()
