"""
API test fixtures.

Provides: async HTTP client bound to the app, a created session
Dependencies: httpx
"""

import httpx
import pytest


@pytest.fixture
async def http(app):
    """Async client talking to the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
async def owned(http) -> dict:
    """A created session: {'sessionId', 'ownerToken'}."""
    response = await http.post("/api/sessions", json={"markdownContent": "# Doc\n\nBody"})
    assert response.status_code == 201
    return response.json()
