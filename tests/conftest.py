"""Test fixtures — a fresh app and SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own Settings pointing at a SQLite file under
   tmp_path, and its own app via create_app(settings). Nothing is shared
   between tests, so there is no cleanup to get wrong.
2. Tables are created with Database.create_all() (Alembic is for real
   deployments).
3. httpx's ASGITransport drives the app in-process. The real auth
   pipeline runs: tests register, log in, and send real tokens.

bcrypt rounds are turned down to 4 so hashing doesn't dominate runtime.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notekeeper.config import Settings
from notekeeper.main import create_app

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notekeeper-test.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        environment="test",
        log_level="WARNING",
    )


@pytest_asyncio.fixture()
async def app(settings):
    app = create_app(settings)
    await app.state.database.create_all()
    try:
        yield app
    finally:
        app.dependency_overrides.clear()
        await app.state.database.dispose()


@pytest_asyncio.fixture()
async def db_session(app):
    """Session on the test database, for service-level tests."""
    async with app.state.database.session() as session:
        yield session


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client with no credentials attached."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_identity(client):
    """Factory: register + log in an identity, return its id and auth headers.

    Learn: the token goes raw into the Authorization header, no "Bearer".
    """

    async def _make(username: str, email: str | None = None, password: str = "password_123"):
        email = email or f"{username}@example.com"
        r = await client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        identity_id = r.json()["id"]

        r = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        token = r.json()["token"]
        return {
            "id": identity_id,
            "email": email,
            "token": token,
            "headers": {"Authorization": token},
        }

    return _make


@pytest_asyncio.fixture()
async def alice(make_identity):
    return await make_identity("alice")


@pytest_asyncio.fixture()
async def bob(make_identity):
    return await make_identity("bob")
