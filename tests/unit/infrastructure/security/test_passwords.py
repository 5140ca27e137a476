"""Tests for bcrypt password hashing."""

from tunecrate.infrastructure.security import BcryptPasswordHasher


class TestBcryptPasswordHasher:
    async def test_hash_and_verify(self) -> None:
        hasher = BcryptPasswordHasher(rounds=4)
        hashed = await hasher.hash("correct horse")

        assert hashed != "correct horse"
        assert hashed.startswith("$2")
        assert await hasher.verify("correct horse", hashed)
        assert not await hasher.verify("wrong horse", hashed)

    async def test_same_password_gets_different_salts(self) -> None:
        hasher = BcryptPasswordHasher(rounds=4)
        assert await hasher.hash("pw") != await hasher.hash("pw")

    async def test_non_bcrypt_stored_value_never_matches(self) -> None:
        hasher = BcryptPasswordHasher(rounds=4)
        assert not await hasher.verify("plaintext", "plaintext")

    async def test_verify_dummy_completes(self) -> None:
        hasher = BcryptPasswordHasher(rounds=4)
        assert await hasher.verify_dummy("anything") is None
