"""Note sharing tests — the note_shares many-to-many relation."""

import pytest

from notekeeper.services.note_service import NoteService


@pytest.fixture
async def bobs_note(client, bob):
    r = await client.post(
        "/api/notes", json={"title": "Shared plan", "content": "details"}, headers=bob["headers"]
    )
    return r.json()


async def _share(client, owner, note_id, target_id):
    return await client.post(
        f"/api/notes/{note_id}/share",
        json={"shared_with_identity_id": target_id},
        headers=owner["headers"],
    )


@pytest.mark.asyncio
async def test_share_note(client, alice, bob, bobs_note):
    r = await _share(client, bob, bobs_note["id"], alice["id"])
    assert r.status_code == 200
    assert r.json() == {"message": "Note shared successfully"}

    r = await client.get("/api/notes/shared", headers=alice["headers"])
    assert r.status_code == 200
    assert [n["id"] for n in r.json()] == [bobs_note["id"]]


@pytest.mark.asyncio
async def test_shared_note_not_in_recipients_own_list(client, alice, bob, bobs_note):
    await _share(client, bob, bobs_note["id"], alice["id"])
    r = await client.get("/api/notes", headers=alice["headers"])
    assert r.json() == []
    # Recipients can't edit it either
    r = await client.put(
        f"/api/notes/{bobs_note['id']}", json={"title": "mine now"}, headers=alice["headers"]
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_list_shares(client, alice, bob, make_identity, bobs_note):
    carol = await make_identity("carol")
    await _share(client, bob, bobs_note["id"], carol["id"])
    await _share(client, bob, bobs_note["id"], alice["id"])

    r = await client.get(f"/api/notes/{bobs_note['id']}/shares", headers=bob["headers"])
    assert r.status_code == 200
    shares = r.json()
    assert [s["username"] for s in shares] == ["alice", "carol"]
    assert set(shares[0]) == {"id", "username", "email"}


@pytest.mark.asyncio
async def test_share_twice_is_idempotent(client, alice, bob, bobs_note):
    r1 = await _share(client, bob, bobs_note["id"], alice["id"])
    r2 = await _share(client, bob, bobs_note["id"], alice["id"])
    assert r1.status_code == 200
    assert r2.status_code == 200

    r = await client.get(f"/api/notes/{bobs_note['id']}/shares", headers=bob["headers"])
    assert len(r.json()) == 1


class _LateNoteService(NoteService):
    """Misses the existing share once, as if a concurrent request inserted it."""

    def __init__(self, db):
        super().__init__(db)
        self.lookups = 0

    async def _find_share(self, note_id, identity_id):
        self.lookups += 1
        if self.lookups == 1:
            return None
        return await super()._find_share(note_id, identity_id)


@pytest.mark.asyncio
async def test_share_racing_insert_returns_existing(client, db_session, alice, bob, bobs_note):
    r = await _share(client, bob, bobs_note["id"], alice["id"])
    assert r.status_code == 200

    svc = _LateNoteService(db_session)
    share = await svc.share_note(bob["id"], bobs_note["id"], alice["id"])
    assert svc.lookups == 2
    assert share.note_id == bobs_note["id"]
    assert share.identity_id == alice["id"]

    r = await client.get(f"/api/notes/{bobs_note['id']}/shares", headers=bob["headers"])
    assert len(r.json()) == 1


@pytest.mark.asyncio
async def test_share_note_not_owned(client, alice, bob, bobs_note):
    r = await _share(client, alice, bobs_note["id"], alice["id"])
    assert r.status_code == 404
    assert r.json()["detail"] == "Note not found"


@pytest.mark.asyncio
async def test_share_with_unknown_identity(client, bob, bobs_note):
    r = await _share(client, bob, bobs_note["id"], 9999)
    assert r.status_code == 404
    assert r.json()["detail"] == "Identity not found"


@pytest.mark.asyncio
async def test_share_with_self_rejected(client, bob, bobs_note):
    r = await _share(client, bob, bobs_note["id"], bob["id"])
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_unshare_note(client, alice, bob, bobs_note):
    await _share(client, bob, bobs_note["id"], alice["id"])

    r = await client.delete(
        f"/api/notes/{bobs_note['id']}/shares/{alice['id']}", headers=bob["headers"]
    )
    assert r.status_code == 204

    r = await client.get("/api/notes/shared", headers=alice["headers"])
    assert r.json() == []

    r = await client.delete(
        f"/api/notes/{bobs_note['id']}/shares/{alice['id']}", headers=bob["headers"]
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_note_removes_shares(client, alice, bob, bobs_note):
    await _share(client, bob, bobs_note["id"], alice["id"])

    r = await client.delete(f"/api/notes/{bobs_note['id']}", headers=bob["headers"])
    assert r.status_code == 204

    r = await client.get("/api/notes/shared", headers=alice["headers"])
    assert r.json() == []
