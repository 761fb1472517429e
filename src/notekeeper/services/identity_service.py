"""Identity service — lookup and username search."""

from typing import Optional

from sqlalchemy import Integer, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

from notekeeper.db.models import Identity
from notekeeper.errors import NotFound


class substring_position(FunctionElement):
    """1-based position of a substring, 0 when absent. Always case-sensitive."""

    type = Integer()
    inherit_cache = True


@compiles(substring_position)
def _compile_instr(element, compiler, **kw):
    return "instr(%s)" % compiler.process(element.clauses, **kw)


@compiles(substring_position, "postgresql")
def _compile_strpos(element, compiler, **kw):
    return "strpos(%s)" % compiler.process(element.clauses, **kw)


class IdentityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_identity(self, identity_id: int) -> Identity:
        identity = await self.db.get(Identity, identity_id)
        if identity is None:
            raise NotFound("Identity")
        return identity

    async def search(self, query: str, limit: Optional[int] = None) -> list[Identity]:
        """Case-sensitive substring match on username.

        The query is matched literally, so "%" and "_" are not wildcards.
        An empty query matches every identity. No limit unless one is given.
        """
        stmt = (
            select(Identity)
            .where(substring_position(Identity.username, query) > 0)
            .order_by(Identity.username, Identity.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
