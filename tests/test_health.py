"""Health endpoint and generic error response tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from tasktrack.config import Settings
from tasktrack.main import create_app


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should report server and database status."""
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["databaseStatus"] == "Connected"
    assert data["environment"] == "test"
    assert "timestamp" in data
    assert "version" in data


@pytest.mark.asyncio
async def test_health_reports_dead_database(tmp_path):
    """Unreachable database → still 200, but degraded/Disconnected."""
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nope.db'}",
        jwt_secret="test-secret-for-the-dead-database-case",
    )
    app = create_app(settings)
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/health")
    finally:
        await app.state.ctx.close()

    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["databaseStatus"] == "Disconnected"


@pytest.mark.asyncio
async def test_unknown_route_is_generic_404(client):
    resp = await client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Route not found"}


@pytest.mark.asyncio
async def test_wrong_method_is_405(client):
    resp = await client.delete("/health")
    assert resp.status_code == 405
    assert resp.json() == {"message": "Method not allowed"}


@pytest.mark.asyncio
async def test_unhandled_error_is_generic_500(app):
    """Internals never leak: the body is always the same generic message."""

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}
    assert "hunter2" not in resp.text


@pytest.mark.asyncio
async def test_database_error_is_generic_500(app, client):
    """SQLAlchemy errors are logged and surfaced as a plain 500."""
    from sqlalchemy.exc import OperationalError

    @app.get("/db-boom")
    async def db_boom():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    resp = await client.get("/db-boom")
    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}
    assert "refused" not in resp.text
