"""Note API routes — owner-scoped CRUD and sharing.

Learn: each handler resolves the subject via get_current_identity and
passes subject_id to the service, which applies the owner filter.
NotFound raised by the service becomes a 404 in main.py's handler.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.dependencies import CurrentIdentity, get_current_identity
from notekeeper.db.engine import get_db
from notekeeper.schemas.identity import IdentityPublic
from notekeeper.schemas.note import (
    MessageResponse,
    NoteCreate,
    NoteRead,
    NoteUpdate,
    ShareRequest,
)
from notekeeper.services.note_service import NoteService

router = APIRouter(prefix="/notes")


def _svc(db: AsyncSession = Depends(get_db)) -> NoteService:
    return NoteService(db)


# ─── Notes ──────────────────────────────────────────────

@router.get("", response_model=list[NoteRead])
async def list_notes(
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    return await svc.list_notes(identity.subject_id)


@router.get("/shared", response_model=list[NoteRead])
async def list_shared_with_me(
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    """Notes other identities have shared with the caller."""
    return await svc.list_shared_with(identity.subject_id)


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(
    note_id: int,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    return await svc.get_note(identity.subject_id, note_id)


@router.post("", response_model=NoteRead, status_code=201)
async def create_note(
    body: NoteCreate,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    return await svc.create_note(identity.subject_id, title=body.title, content=body.content)


@router.put("/{note_id}", status_code=204)
async def update_note(
    note_id: int,
    body: NoteUpdate,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    """Full or partial update. Fields left out of the body are untouched."""
    await svc.update_note(identity.subject_id, note_id, body.model_dump(exclude_unset=True))
    return Response(status_code=204)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: int,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    await svc.delete_note(identity.subject_id, note_id)
    return Response(status_code=204)


# ─── Sharing ────────────────────────────────────────────

@router.post("/{note_id}/share", response_model=MessageResponse)
async def share_note(
    note_id: int,
    body: ShareRequest,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    await svc.share_note(identity.subject_id, note_id, body.shared_with_identity_id)
    return MessageResponse(message="Note shared successfully")


@router.get("/{note_id}/shares", response_model=list[IdentityPublic])
async def list_shares(
    note_id: int,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    return await svc.list_shares(identity.subject_id, note_id)


@router.delete("/{note_id}/shares/{identity_id}", status_code=204)
async def unshare_note(
    note_id: int,
    identity_id: int,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    await svc.unshare_note(identity.subject_id, note_id, identity_id)
    return Response(status_code=204)
