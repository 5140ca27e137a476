"""bcrypt password hashing."""

import asyncio

import bcrypt

from tunecrate.domain.ports import IPasswordHasher


class BcryptPasswordHasher(IPasswordHasher):
    """IPasswordHasher backed by the bcrypt library.

    bcrypt is deliberately slow (~50-100ms at 10 rounds), so both calls run in a
    worker thread to keep the event loop free for other requests.
    """

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds
        self._dummy_hash: bytes | None = None

    async def hash(self, raw_password: str) -> str:
        return await asyncio.to_thread(self._hash_sync, raw_password)

    async def verify(self, raw_password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._verify_sync, raw_password, password_hash)

    # Hey future me - called on login for UNKNOWN emails. It burns the same bcrypt time as a
    # real check so an attacker can't tell "no such account" from "wrong password" by timing.
    async def verify_dummy(self, raw_password: str) -> None:
        if self._dummy_hash is None:
            self._dummy_hash = (await self.hash("dummy-password-for-timing")).encode()
        await asyncio.to_thread(
            self._verify_sync, raw_password, self._dummy_hash.decode()
        )

    def _hash_sync(self, raw_password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(raw_password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def _verify_sync(raw_password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(
                raw_password.encode("utf-8"), password_hash.encode("utf-8")
            )
        except ValueError:
            # Stored value is not a bcrypt hash (corrupt or legacy plaintext row)
            return False
