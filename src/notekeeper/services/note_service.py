"""Note service — owner-scoped CRUD and sharing.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database.

Every read and write is filtered by owner_id == subject in the same
statement, so "not yours" and "doesn't exist" are the same NotFound.
Updates and deletes are single UPDATE/DELETE statements and the
rowcount decides between success and NotFound; concurrent writers
to the same note are last-write-wins.
"""

from typing import Any, Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.db.models import Identity, Note, SharedAccess
from notekeeper.errors import NotFound, ValidationFailed

logger = structlog.get_logger()

UPDATABLE_FIELDS = frozenset({"title", "content"})


class NoteService:
    """Business logic for notes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── CRUD ───────────────────────────────────────────

    async def list_notes(self, owner_id: int) -> list[Note]:
        result = await self.db.execute(
            select(Note)
            .where(Note.owner_id == owner_id)
            .order_by(Note.created_at.desc(), Note.id.desc())
        )
        return list(result.scalars().all())

    async def get_note(self, owner_id: int, note_id: int) -> Note:
        result = await self.db.execute(
            select(Note).where(Note.id == note_id, Note.owner_id == owner_id)
        )
        note = result.scalars().first()
        if note is None:
            raise NotFound("Note")
        return note

    async def create_note(self, owner_id: int, title: str, content: str = "") -> Note:
        note = Note(owner_id=owner_id, title=title, content=content)
        self.db.add(note)
        await self.db.flush()
        await self.db.refresh(note)
        await self.db.commit()
        logger.info("notes.created", note_id=note.id, owner_id=owner_id)
        return note

    async def update_note(self, owner_id: int, note_id: int, fields: dict[str, Any]) -> None:
        """Apply a full or partial update.

        Only title/content are writable; anything else in `fields` is ignored.
        An empty update still checks ownership.
        """
        values = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if not values:
            await self.get_note(owner_id, note_id)
            return

        result = await self.db.execute(
            update(Note)
            .where(Note.id == note_id, Note.owner_id == owner_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound("Note")
        await self.db.commit()
        logger.info("notes.updated", note_id=note_id, fields=sorted(values))

    async def delete_note(self, owner_id: int, note_id: int) -> None:
        """Delete an owned note and its share rows in one transaction."""
        owned = select(Note.id).where(Note.id == note_id, Note.owner_id == owner_id)
        await self.db.execute(
            delete(SharedAccess)
            .where(SharedAccess.note_id.in_(owned))
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(
            delete(Note)
            .where(Note.id == note_id, Note.owner_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound("Note")
        await self.db.commit()
        logger.info("notes.deleted", note_id=note_id)

    # ─── Sharing ────────────────────────────────────────

    async def share_note(self, owner_id: int, note_id: int, identity_id: int) -> SharedAccess:
        """Give identity_id access to an owned note. Sharing twice is a no-op."""
        await self.get_note(owner_id, note_id)
        if identity_id == owner_id:
            raise ValidationFailed("Cannot share a note with its owner")

        target = await self.db.get(Identity, identity_id)
        if target is None:
            raise NotFound("Identity")

        existing = await self._find_share(note_id, identity_id)
        if existing is not None:
            return existing

        share = SharedAccess(note_id=note_id, identity_id=identity_id)
        self.db.add(share)
        try:
            await self.db.flush()
        except IntegrityError:
            # A concurrent share of the same pair won the unique constraint.
            await self.db.rollback()
            existing = await self._find_share(note_id, identity_id)
            if existing is None:
                raise
            return existing
        await self.db.commit()
        logger.info("notes.shared", note_id=note_id, identity_id=identity_id)
        return share

    async def _find_share(self, note_id: int, identity_id: int) -> Optional[SharedAccess]:
        result = await self.db.execute(
            select(SharedAccess).where(
                SharedAccess.note_id == note_id,
                SharedAccess.identity_id == identity_id,
            )
        )
        return result.scalars().first()

    async def unshare_note(self, owner_id: int, note_id: int, identity_id: int) -> None:
        await self.get_note(owner_id, note_id)
        result = await self.db.execute(
            delete(SharedAccess)
            .where(
                SharedAccess.note_id == note_id,
                SharedAccess.identity_id == identity_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound("Share")
        await self.db.commit()
        logger.info("notes.unshared", note_id=note_id, identity_id=identity_id)

    async def list_shares(self, owner_id: int, note_id: int) -> list[Identity]:
        """Identities an owned note is shared with."""
        await self.get_note(owner_id, note_id)
        result = await self.db.execute(
            select(Identity)
            .join(SharedAccess, SharedAccess.identity_id == Identity.id)
            .where(SharedAccess.note_id == note_id)
            .order_by(Identity.username)
        )
        return list(result.scalars().all())

    async def list_shared_with(self, identity_id: int) -> list[Note]:
        """Notes other identities have shared with identity_id."""
        result = await self.db.execute(
            select(Note)
            .join(SharedAccess, SharedAccess.note_id == Note.id)
            .where(SharedAccess.identity_id == identity_id)
            .order_by(Note.created_at.desc(), Note.id.desc())
        )
        return list(result.scalars().all())
