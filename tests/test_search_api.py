"""Identity search tests."""

import pytest


@pytest.fixture
async def people(make_identity):
    searcher = await make_identity("searcher")
    for name in ("john", "JoAnna", "JOHN", "bojo", "alice", "a_b", "percent"):
        await make_identity(name)
    return searcher


@pytest.mark.asyncio
async def test_search_substring(client, people):
    r = await client.get("/api/search", params={"q": "jo"}, headers=people["headers"])
    assert r.status_code == 200
    names = sorted(i["username"] for i in r.json())
    assert names == ["bojo", "john"]
    assert all("jo" in n for n in names)


@pytest.mark.asyncio
async def test_search_is_case_sensitive(client, people):
    r = await client.get("/api/search", params={"q": "JO"}, headers=people["headers"])
    assert [i["username"] for i in r.json()] == ["JOHN"]

    r = await client.get("/api/search", params={"q": "Jo"}, headers=people["headers"])
    assert [i["username"] for i in r.json()] == ["JoAnna"]


@pytest.mark.asyncio
async def test_search_projects_public_fields_only(client, people):
    r = await client.get("/api/search", params={"q": "jo"}, headers=people["headers"])
    for item in r.json():
        assert set(item) == {"id", "username", "email"}


@pytest.mark.asyncio
async def test_search_matches_wildcards_literally(client, people):
    r = await client.get("/api/search", params={"q": "_"}, headers=people["headers"])
    assert [i["username"] for i in r.json()] == ["a_b"]

    r = await client.get("/api/search", params={"q": "%"}, headers=people["headers"])
    assert r.json() == []


@pytest.mark.asyncio
async def test_search_no_match(client, people):
    r = await client.get("/api/search", params={"q": "zzz"}, headers=people["headers"])
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_search_empty_query_returns_everyone(client, people):
    r = await client.get("/api/search", params={"q": ""}, headers=people["headers"])
    assert r.status_code == 200
    assert len(r.json()) == 8


@pytest.mark.asyncio
async def test_search_uncapped_by_default(client, people, make_identity):
    for i in range(55):
        await make_identity(f"bulk{i}")
    r = await client.get("/api/search", params={"q": "bulk"}, headers=people["headers"])
    assert len(r.json()) == 55


@pytest.mark.asyncio
async def test_search_limit(client, people):
    r = await client.get(
        "/api/search", params={"q": "o", "limit": 2}, headers=people["headers"]
    )
    assert len(r.json()) == 2


@pytest.mark.asyncio
async def test_search_requires_query(client, people):
    r = await client.get("/api/search", headers=people["headers"])
    assert r.status_code == 422

    r = await client.get(
        "/api/search", params={"q": "o", "limit": 0}, headers=people["headers"]
    )
    assert r.status_code == 422
