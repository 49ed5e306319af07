"""Test fixtures — one throwaway SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own Settings pointing at a fresh SQLite file under
   tmp_path (aiosqlite driver), a low bcrypt cost and a test JWT secret.
2. create_app(settings) builds an app with its own AppContext: no
   dependency overrides, no shared engine, the real auth pipeline runs.
3. Tables are created from the ORM metadata; the file vanishes with tmp_path.

This gives us fast, isolated tests without a database server.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tasktrack.config import Settings
from tasktrack.db.engine import create_tables
from tasktrack.main import create_app

TEST_PASSWORD = "secret1"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tasktrack.db'}",
        jwt_secret="test-secret-not-for-production-0123456789",
        bcrypt_rounds=4,
        environment="test",
    )


@pytest_asyncio.fixture()
async def app(settings):
    app = create_app(settings)
    await create_tables(app.state.ctx.engine)
    try:
        yield app
    finally:
        await app.state.ctx.close()


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def session_factory(app):
    """Factory for extra sessions, one per simulated concurrent request."""
    return app.state.ctx.session_factory


@pytest_asyncio.fixture()
async def db_session(app):
    """A session on the same database the app uses, for service-level tests."""
    async with app.state.ctx.session_factory() as session:
        yield session


@pytest.fixture()
def tokens(app):
    return app.state.ctx.tokens


@pytest.fixture()
def signup(client):
    """Register a user over HTTP. Returns (user_dict, auth_headers)."""

    async def _signup(name: str = "Ann", email: str = "ann@x.com", password: str = TEST_PASSWORD):
        r = await client.post(
            "/api/register",
            json={"name": name, "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _signup
