"""JWT session token issuance and validation.

Learn: JWT (JSON Web Token) provides stateless authentication. The
token carries the user id ("sub") and an absolute expiry ("exp");
validating it is a signature check plus a clock comparison. No
database lookup, no server-side session table.

TokenService is built once at startup from Settings, so the signing key
never comes from request data and tests can build their own instance.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from tasktrack.config import Settings
from tasktrack.errors import ExpiredToken, InvalidToken, MissingToken


class TokenService:
    """Issues and validates signed, time-limited identity tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires: timedelta = timedelta(days=7),
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.expires = expires

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires=timedelta(days=settings.token_expire_days),
        )

    def issue(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> str:
        """Create a token asserting user_id, valid for self.expires."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.expires,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate(self, token: Optional[str]) -> uuid.UUID:
        """Verify signature and expiry, return the embedded user id.

        Raises MissingToken, ExpiredToken or InvalidToken.
        """
        if not token:
            raise MissingToken()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredToken()
        except jwt.InvalidTokenError:
            raise InvalidToken()

        try:
            return uuid.UUID(payload["sub"])
        except (ValueError, TypeError, AttributeError):
            raise InvalidToken()
