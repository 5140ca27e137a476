"""Shared-secret access guard for mutating endpoints."""

import secrets

from tunecrate.domain.ports import IAccessGuard


# Hey future me, this is the WHOLE authorization model: one admin secret, binary allow/deny.
# It's an injectable object (not a module constant) so deployments can rotate the secret via
# config and tests can hand in their own guard. compare_digest keeps the comparison
# constant-time. authorize() is pure and never logs the token.
class SharedSecretAccessGuard(IAccessGuard):
    """Grants access when the token exactly equals the configured secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Access guard secret must not be empty")
        self._secret = secret.encode("utf-8")

    def authorize(self, token: str | None) -> bool:
        if not token:
            return False
        return secrets.compare_digest(token.encode("utf-8"), self._secret)

