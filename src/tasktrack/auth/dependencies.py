"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request. The only auth
mechanism is a Bearer JWT in the Authorization header.
"""

import uuid
from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from tasktrack.auth.jwt import TokenService
from tasktrack.errors import InvalidToken, MissingToken


class CurrentIdentity:
    """The authenticated user making the request.

    Learn: Downstream code only ever sees user_id. It is trusted as
    asserted by the token signature and is never re-checked against
    the users table on ordinary task requests.
    """

    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id})"


def get_token_service(request: Request) -> TokenService:
    return request.app.state.ctx.tokens


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an "Authorization: Bearer <token>" value.

    Returns None when the header is absent or empty. A header with any
    other scheme is treated as a malformed token.
    """
    if not authorization or not authorization.strip():
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        raise InvalidToken()
    token = token.strip()
    if not token:
        raise MissingToken()
    return token


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity:
    """Extract current identity (required: 401 if missing or invalid)."""
    user_id = tokens.validate(bearer_token(authorization))
    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return CurrentIdentity(user_id=user_id)
