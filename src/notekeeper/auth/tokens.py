"""JWT session token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries the subject id ("sub"), a type marker, and iat/exp claims; nothing
is persisted server-side. PyJWT enforces exp on decode.

The signing secret is injected through the constructor at startup;
there is no module-level secret.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

ACCESS_TOKEN_TYPE = "access"


class TokenError(Exception):
    """Raised when token verification fails."""


class TokenService:
    """Issues and verifies signed session tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self.expire_minutes * 60

    def issue(self, subject_id: int, expires_minutes: Optional[int] = None) -> str:
        """Create a signed access token for subject_id."""
        now = datetime.now(timezone.utc)
        if expires_minutes is None:
            expires_minutes = self.expire_minutes
        payload = {
            # PyJWT requires "sub" to be a string
            "sub": str(subject_id),
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + timedelta(minutes=expires_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        """Verify and decode a token.

        Returns the payload dict on success.
        Raises TokenError on failure.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise TokenError("Not an access token")
        return payload

    def verify(self, token: str) -> Optional[int]:
        """Return the subject id carried by token, or None if it is not valid.

        Fails closed: any malformed, expired, mis-signed or otherwise
        unusable token yields None. Never raises.
        """
        if not token:
            return None
        try:
            payload = self.decode(token)
            return int(payload["sub"])
        except (TokenError, KeyError, TypeError, ValueError):
            return None
