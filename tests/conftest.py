"""Shared test fixtures.

Provides a FastAPI ``test_client`` and an ``auth_client`` whose requests are
made as the signed-in ``USER_ID``.
"""

import os
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")

from tests.helpers import USER_ID  # noqa: E402


@pytest.fixture()
def test_client() -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient."""
    from app.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture()
def auth_client(test_client: TestClient) -> Generator[TestClient, None, None]:
    """TestClient with ``get_current_user`` resolved to ``USER_ID``."""
    from app.core.auth import CurrentUser, get_current_user
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        id=USER_ID, email="me@example.com"
    )
    yield test_client
    app.dependency_overrides.clear()
