"""JWT identity token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A token is a pure function of {subject, username} plus the server secret
and a fixed lifetime — nothing is stored per token, so there is no
revocation list and logout is the client discarding its token.

The payload deliberately omits the role; see auth.identity.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from bizdir.errors import ConfigurationError


class TokenError(Exception):
    """Raised when token verification fails."""


class TokenIssuer:
    """Signs and verifies identity tokens with one server secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 24 * 60,
    ):
        if not secret or not secret.strip():
            raise ConfigurationError("JWT signing secret is not configured")
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(
        self,
        subject: uuid.UUID | str,
        username: str,
        now: Optional[datetime] = None,
    ) -> str:
        """Create a signed token for an account."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(subject),
            "username": username,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        """Verify and decode a token.

        Returns the payload dict on success.
        Raises TokenError on failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")
        return payload

    def subject_of(self, token: str) -> uuid.UUID:
        """Verify a token and return its subject as an account id."""
        payload = self.verify(token)
        try:
            return uuid.UUID(payload["sub"])
        except (TypeError, ValueError):
            raise TokenError("Invalid token payload")
