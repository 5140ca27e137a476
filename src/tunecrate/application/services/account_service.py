"""Account service: registration, login and preference replacement.

Hey future me - this is the ACCOUNT STORE. Emails are normalized (trim + lowercase) at
every entry point so "A@X.io" and "a@x.io" are one account. Passwords only ever leave
this service as bcrypt hashes, and login failure NEVER says which half was wrong.
"""

import logging
from typing import Any

from tunecrate.domain.entities import User, normalize_email
from tunecrate.domain.exceptions import (
    DuplicateAccountError,
    EntityNotFoundException,
    InvalidCredentialsError,
    ValidationError,
)
from tunecrate.domain.ports import IAccountRepository, IPasswordHasher
from tunecrate.domain.value_objects import Playlist, Preferences

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes, bcrypt>=5 refuses anything longer
MAX_PASSWORD_BYTES = 72


class AccountService:
    """Service for account operations."""

    def __init__(self, accounts: IAccountRepository, hasher: IPasswordHasher):
        """Initialize account service.

        Args:
            accounts: Account repository bound to the current session
            hasher: Password hasher
        """
        self._accounts = accounts
        self._hasher = hasher

    async def register(self, email: str | None, raw_password: str | None) -> User:
        """Create an account with empty likes and playlists.

        Raises:
            ValidationError: email or password missing, or password over 72 bytes
            DuplicateAccountError: normalized email already registered
        """
        normalized = normalize_email(email)
        if not normalized or not raw_password:
            raise ValidationError("Email and password are required")
        if len(raw_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes (UTF-8)"
            )

        # Pre-check for the common case. Two concurrent registrations can both pass it,
        # the unique constraint catches the loser inside accounts.add().
        if await self._accounts.get_by_email(normalized) is not None:
            raise DuplicateAccountError(normalized)

        password_hash = await self._hasher.hash(raw_password)
        user = await self._accounts.add(normalized, password_hash)
        logger.info("Registered account %s", user.id, extra={"user_id": user.id})
        return user

    async def authenticate(self, email: str | None, raw_password: str | None) -> User:
        """Return the account when the credentials match.

        Raises:
            ValidationError: email or password missing
            InvalidCredentialsError: unknown email or wrong password (same message)
        """
        normalized = normalize_email(email)
        if not normalized or not raw_password:
            raise ValidationError("Email and password are required")

        user = await self._accounts.get_by_email(normalized)
        if user is None:
            await self._hasher.verify_dummy(raw_password)
            raise InvalidCredentialsError()

        if not await self._hasher.verify(raw_password, user.password_hash):
            logger.info("Failed login for account %s", user.id)
            raise InvalidCredentialsError()
        return user

    async def get_by_id(self, user_id: int) -> User:
        user = await self._accounts.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundException("User", user_id)
        return user

    async def replace_likes(self, user_id: int, raw_likes: Any) -> tuple[str, ...]:
        """Replace the whole likes collection. An empty list clears it."""
        likes = Preferences.parse_likes(raw_likes)
        if not await self._accounts.set_likes(user_id, likes):
            raise EntityNotFoundException("User", user_id)
        return likes

    async def replace_playlists(
        self, user_id: int, raw_playlists: Any
    ) -> tuple[Playlist, ...]:
        """Replace the whole playlists collection. An empty list clears it."""
        playlists = Preferences.parse_playlists(raw_playlists)
        if not await self._accounts.set_playlists(user_id, playlists):
            raise EntityNotFoundException("User", user_id)
        return playlists
