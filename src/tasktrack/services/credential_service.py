"""Credential service — user registration and login verification.

Learn: This is the only code that touches password hashes.
- register(): validate → check email is free → bcrypt → insert
- verify(): look up by email → bcrypt.checkpw → user or InvalidCredentials

bcrypt is deliberately slow (~100ms at 12 rounds), so hashing runs in a
worker thread via asyncio.to_thread() instead of stalling the event loop.
Unknown emails still pay for one bcrypt comparison, so response timing
doesn't reveal which emails are registered.
"""

import asyncio
import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.password import burn_verify, hash_password, verify_password
from tasktrack.db.models import User
from tasktrack.errors import (
    DuplicateIdentity,
    InvalidCredentials,
    InvalidToken,
    ValidationError,
)

logger = structlog.get_logger()


class CredentialService:
    """Owns user records and checks login attempts against them."""

    def __init__(self, db: AsyncSession, bcrypt_rounds: int = 12):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    # ─── Register ────────────────────────────────────────

    async def register(self, name: str, email: str, password: str) -> User:
        """Create a new user. Email must not already be registered."""
        name = (name or "").strip()
        email = (email or "").strip()
        if not name:
            raise ValidationError("Name is required")
        if not email:
            raise ValidationError("Email is required")
        if "@" not in email:
            raise ValidationError("Email address is invalid")
        if not password:
            raise ValidationError("Password is required")

        if await self._find_by_email(email) is not None:
            raise DuplicateIdentity()

        password_hash = await asyncio.to_thread(
            hash_password, password, self.bcrypt_rounds
        )
        user = User(name=name, email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise DuplicateIdentity()
        await self.db.refresh(user)

        logger.info("auth.registered", user_id=str(user.id))
        return user

    # ─── Verify ──────────────────────────────────────────

    async def verify(self, email: str, password: str) -> User:
        """Return the user for a correct email/password pair.

        Unknown email and wrong password raise the same InvalidCredentials.
        """
        email = (email or "").strip()
        password = password or ""

        user = await self._find_by_email(email) if email else None
        if user is None:
            await asyncio.to_thread(burn_verify, password, self.bcrypt_rounds)
            logger.info("auth.login_failed")
            raise InvalidCredentials()

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.info("auth.login_failed")
            raise InvalidCredentials()

        logger.info("auth.login", user_id=str(user.id))
        return user

    # ─── Lookup ──────────────────────────────────────────

    async def get(self, user_id: uuid.UUID) -> User:
        """Load the user a token points at. A dangling id is an invalid token."""
        user = await self.db.get(User, user_id)
        if user is None:
            raise InvalidToken()
        return user

    async def _find_by_email(self, email: str):
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()
