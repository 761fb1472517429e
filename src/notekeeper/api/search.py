"""Identity search API.

Learn: matches usernames only and returns the public projection
{id, username, email}; password hashes never leave the service.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.db.engine import get_db
from notekeeper.schemas.identity import IdentityPublic
from notekeeper.services.identity_service import IdentityService

router = APIRouter()


@router.get("/search", response_model=list[IdentityPublic])
async def search_identities(
    q: str = Query(..., max_length=128),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Substring search on username. An empty q returns everyone."""
    return await IdentityService(db).search(q, limit=limit)
