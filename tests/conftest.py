"""Shared test configuration.

Testing Strategy:
1. Data service: a recording fake of the Supabase client (tests/fixtures/supabase.py)
2. Authentication: the session dependency is overridden per test
3. HTTP: the real application through httpx's ASGI transport
"""

import os


# Settings are cached on first use; configure the environment before any app import
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")

import httpx
import pytest
import pytest_asyncio

from coursemart.auth.dependencies import get_session_context, get_user_client
from coursemart.auth.session import SessionContext
from coursemart.middleware.security import limiter
from tests.fixtures.sessions import make_session
from tests.fixtures.supabase import FakeSupabase


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def session_holder() -> dict[str, SessionContext]:
    """Mutable slot read by the session dependency override."""
    return {"session": SessionContext.anonymous()}


@pytest.fixture
def as_student(session_holder) -> SessionContext:
    session_holder["session"] = make_session()
    return session_holder["session"]


@pytest.fixture
def as_admin(session_holder) -> SessionContext:
    session_holder["session"] = make_session(user_id="admin-1", role="admin", email="admin@example.com")
    return session_holder["session"]


@pytest.fixture
def app(fake_db, session_holder):
    from coursemart.main import app

    app.dependency_overrides[get_user_client] = lambda: fake_db
    app.dependency_overrides[get_session_context] = lambda: session_holder["session"]
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
