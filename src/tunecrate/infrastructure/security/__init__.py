"""Security collaborators: password hashing and the admin access guard."""

from .access_guard import SharedSecretAccessGuard
from .passwords import BcryptPasswordHasher

__all__ = ["BcryptPasswordHasher", "SharedSecretAccessGuard"]
