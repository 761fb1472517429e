"""Settings validation tests."""

import pytest
from pydantic import ValidationError

from notekeeper.config import DEFAULT_JWT_SECRET, Settings


def test_default_secret_allowed_in_development():
    s = Settings(environment="development")
    assert s.jwt_secret == DEFAULT_JWT_SECRET


def test_default_secret_refused_in_production():
    with pytest.raises(ValidationError):
        Settings(environment="production", jwt_secret=DEFAULT_JWT_SECRET)


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("NOTEKEEPER_ACCESS_TOKEN_EXPIRE_MINUTES", "5")
    monkeypatch.setenv("NOTEKEEPER_TOKEN_HEADER", "X-Auth-Token")
    s = Settings()
    assert s.access_token_expire_minutes == 5
    assert s.token_header == "X-Auth-Token"


@pytest.mark.asyncio
async def test_custom_token_header(tmp_path):
    from httpx import ASGITransport, AsyncClient

    from notekeeper.main import create_app

    app = create_app(
        Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'hdr.db'}",
            jwt_secret="header-test-secret-0123456789abcdef",
            token_header="X-Auth-Token",
            environment="test",
        )
    )
    await app.state.database.create_all()
    token = app.state.token_service.issue(1)
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            r = await c.get("/api/notes", headers={"Authorization": token})
            assert r.status_code == 401
            r = await c.get("/api/notes", headers={"X-Auth-Token": token})
            assert r.status_code == 200
            assert r.json() == []
    finally:
        await app.state.database.dispose()
