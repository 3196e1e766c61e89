"""Fixtures for driving the ASGI app in-process."""

import httpx
import pytest
import pytest_asyncio
from jose import jwt

from app.core.config import settings
from app.core.storage import get_session_factory
from app.main import app
from app.services.dependencies import (
    get_dispatcher,
    get_email_notifier,
    get_file_storage,
)


@pytest_asyncio.fixture
async def client(session_factory, dispatcher, mock_emails, mock_storage):
    """HTTP client bound to the app with test collaborators injected."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_email_notifier] = lambda: mock_emails
    app.dependency_overrides[get_file_storage] = lambda: mock_storage

    # Unhandled errors come back as 500 responses instead of raising
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    """Build an Authorization header for a seeded user."""

    def _auth(user) -> dict[str, str]:
        token = jwt.encode(
            {"userId": user.id, "role": user.role.value},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth
