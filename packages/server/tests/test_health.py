"""
Health check endpoint tests.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.database import make_session_factory
from app.main import create_app


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_ready_check(client: AsyncClient):
    """Ready endpoint should return status ready."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


@pytest.mark.asyncio
async def test_ready_check_without_database(settings, tmp_path):
    """Ready endpoint should report 503 when the database cannot be opened."""
    missing = tmp_path / "no-such-dir" / "roomdesk.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{missing}")
    application = create_app(settings=settings, session_factory=make_session_factory(engine))
    try:
        async with AsyncClient(transport=ASGITransport(app=application), base_url="http://test") as ac:
            response = await ac.get("/ready")
    finally:
        await engine.dispose()
    assert response.status_code == 503
    assert response.json() == {"status": "unavailable"}


@pytest.mark.asyncio
async def test_api_root(client: AsyncClient):
    """API v1 root should return version and endpoint list."""
    response = await client.get("/api/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["api"] == "v1"
    assert "/requests/active" in data["endpoints"]


@pytest.mark.asyncio
async def test_openapi_documents_error_envelope(client: AsyncClient):
    """Error responses should reference the ErrorResponse schema."""
    response = await client.get("/openapi.json")
    assert response.status_code == 200
    schema = response.json()
    assert "ErrorResponse" in schema["components"]["schemas"]

    create = schema["paths"]["/api/v1/requests"]["post"]["responses"]
    assert create["409"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
    signin = schema["paths"]["/auth/signin"]["post"]["responses"]
    assert "401" in signin
