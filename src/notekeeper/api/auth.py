"""Auth API — registration, login, current identity.

Learn: Routes for identity authentication:
- POST /auth/register → create a new identity
- POST /auth/login → email/password → signed token
- GET /auth/me → the identity behind the presented token
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.dependencies import (
    CurrentIdentity,
    get_auth_service,
    get_current_identity,
)
from notekeeper.auth.service import AuthService
from notekeeper.db.engine import get_db
from notekeeper.schemas.identity import IdentityCreate, IdentityRead
from notekeeper.services.identity_service import IdentityService

router = APIRouter(prefix="/auth")


# ─── Schemas ─────────────────────────────────────────────


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "jwt"
    expires_in: int


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=IdentityRead, status_code=201)
async def register(body: IdentityCreate, svc: AuthService = Depends(get_auth_service)):
    """Create a new identity."""
    return await svc.register(
        username=body.username,
        email=body.email,
        password=body.password,
    )


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(get_auth_service)):
    """Login with email and password → signed token."""
    token = await svc.authenticate(body.email, body.password)
    return TokenResponse(token=token, expires_in=svc.tokens.expires_in)


# ─── Current identity ───────────────────────────────────


@router.get("/me", response_model=IdentityRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated identity."""
    return await IdentityService(db).get_identity(identity.subject_id)
