# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

from contextlib import ExitStack
from typing import Generator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from main import create_app
from dependencies.auth import CurrentUser, get_current_user
from core.rate_limiter import reset_rate_limits
from tests.fakes import FakeSupabase


# Every module that does `from core.supabase_client import get_supabase_client`
SUPABASE_CONSUMERS = [
    "core.supabase_client",
    "core.authorization",
    "dependencies.auth",
    "services.users",
    "services.companies",
    "services.invitations",
    "services.employees",
    "services.sites",
    "services.reports",
    "services.report_export",
    "jobs.reconcile_orphans",
]


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    app = create_app()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db() -> Generator[FakeSupabase, None, None]:
    """In-memory Supabase patched into every consumer module."""
    fake = FakeSupabase()
    with ExitStack() as stack:
        for module in SUPABASE_CONSUMERS:
            stack.enter_context(patch(f"{module}.get_supabase_client", return_value=fake))
        yield fake


@pytest.fixture
def login(app):
    """
    Authenticate subsequent requests as the given user:

        login("user-1", "owner@example.com")
    """

    def _login(user_id: str, email: str, name: str = None) -> CurrentUser:
        user = CurrentUser(id=user_id, email=email, name=name)
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _login


@pytest.fixture(autouse=True)
def reset_limits():
    """Reset rate limit counters before each test."""
    reset_rate_limits()
    yield
    reset_rate_limits()
