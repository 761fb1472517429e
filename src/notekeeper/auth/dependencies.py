"""FastAPI auth dependencies — the Request Gate.

Learn: These are used as Depends() in route handlers (and as router-level
dependencies= in api/__init__.py) to extract and validate the current
identity from the request.

The token travels raw in a configurable header (Authorization by default);
a "Bearer " prefix is tolerated. No header → 401, bad token → 403.
"""

from typing import Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.service import AuthService
from notekeeper.auth.tokens import TokenService
from notekeeper.config import Settings
from notekeeper.db.engine import get_db
from notekeeper.errors import InvalidToken, MissingToken


class CurrentIdentity:
    """The authenticated subject making the request.

    Learn: This is the unified auth context. All downstream code uses
    subject_id to scope note queries by owner_id.
    """

    def __init__(self, subject_id: int):
        self.subject_id = subject_id

    def __repr__(self) -> str:
        return f"CurrentIdentity(subject_id={self.subject_id})"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(db, tokens, bcrypt_rounds=settings.bcrypt_rounds)


def _extract_token(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    token = raw.strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    return token or None


async def get_current_identity(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_app_settings),
) -> CurrentIdentity:
    """Resolve the subject from the token header (required).

    Raises MissingToken (401) when the header is absent or blank and
    InvalidToken (403) when the token does not verify.
    """
    token = _extract_token(request.headers.get(settings.token_header))
    if token is None:
        raise MissingToken()

    subject_id = tokens.verify(token)
    if subject_id is None:
        raise InvalidToken()

    identity = CurrentIdentity(subject_id=subject_id)
    request.state.identity = identity
    structlog.contextvars.bind_contextvars(subject_id=subject_id)
    return identity
