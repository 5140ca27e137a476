"""Tests for the shared-secret access guard."""

import pytest

from tunecrate.domain.exceptions import AuthorizationError
from tunecrate.infrastructure.security import SharedSecretAccessGuard


class TestSharedSecretAccessGuard:
    def test_exact_secret_is_authorized(self) -> None:
        assert SharedSecretAccessGuard("s3cret").authorize("s3cret") is True

    @pytest.mark.parametrize("token", [None, "", "S3CRET", "s3cret ", "s3cre"])
    def test_anything_else_is_denied(self, token: str | None) -> None:
        assert SharedSecretAccessGuard("s3cret").authorize(token) is False

    def test_require_raises_forbidden(self) -> None:
        with pytest.raises(AuthorizationError) as exc_info:
            SharedSecretAccessGuard("s3cret").require("wrong")
        assert exc_info.value.code == "forbidden"

    def test_require_passes_silently(self) -> None:
        SharedSecretAccessGuard("s3cret").require("s3cret")

    def test_empty_secret_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            SharedSecretAccessGuard("")

    def test_non_ascii_secret(self) -> None:
        guard = SharedSecretAccessGuard("pässwörd")
        assert guard.authorize("pässwörd")
        assert not guard.authorize("passwort")
