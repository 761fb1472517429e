"""Auth service — credential checks and identity registration."""

from functools import lru_cache

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from notekeeper.auth.tokens import TokenService
from notekeeper.db.models import Identity
from notekeeper.errors import Conflict, InvalidCredentials

logger = structlog.get_logger()


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    return hash_password("not-a-real-password", rounds=rounds)


class AuthService:
    """Exchanges credentials for tokens and creates identities."""

    def __init__(
        self,
        db: AsyncSession,
        tokens: TokenService,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ):
        self.db = db
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds

    async def authenticate(self, email: str, password: str) -> str:
        """Check email/password and return a fresh session token.

        Raises InvalidCredentials for an unknown email or a wrong password;
        the two cases are indistinguishable to the caller.
        """
        result = await self.db.execute(select(Identity).where(Identity.email == email))
        identity = result.scalars().first()

        if identity is None:
            # Spend the same bcrypt time as a real check
            verify_password(password, _dummy_hash(self.bcrypt_rounds))
            logger.info("auth.login_failed", reason="unknown_email")
            raise InvalidCredentials()

        if not verify_password(password, identity.password_hash):
            logger.info("auth.login_failed", reason="bad_password", identity_id=identity.id)
            raise InvalidCredentials()

        logger.info("auth.login_succeeded", identity_id=identity.id)
        return self.tokens.issue(identity.id)

    async def register(self, username: str, email: str, password: str) -> Identity:
        """Create an identity. Email must be unused."""
        result = await self.db.execute(select(Identity.id).where(Identity.email == email))
        if result.first() is not None:
            raise Conflict("Email already registered")

        identity = Identity(
            username=username,
            email=email,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
        )
        self.db.add(identity)
        await self.db.flush()
        await self.db.refresh(identity)
        await self.db.commit()

        logger.info("auth.identity_registered", identity_id=identity.id)
        return identity

