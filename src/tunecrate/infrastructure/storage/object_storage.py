"""Supabase Storage client for offloading uploaded audio.

Hey future me - Supabase Storage speaks a tiny REST protocol:
- upload:  POST   {base}/storage/v1/object/{bucket}/{key}   (x-upsert: true overwrites)
- delete:  DELETE {base}/storage/v1/object/{bucket}/{key}
- public:  GET    {base}/storage/v1/object/public/{bucket}/{key}   (public buckets only)
Auth is the service key, sent BOTH as "Authorization: Bearer" and as "apikey" header
(the gateway checks apikey, storage checks the bearer). Upsert makes retries idempotent:
same key → same object, no "already exists" error.
"""

import logging
from urllib.parse import quote

import httpx

from tunecrate.config import ObjectStorageSettings
from tunecrate.domain.exceptions import ConfigurationError, StorageFailureError
from tunecrate.domain.ports import IObjectStorage

logger = logging.getLogger(__name__)

# Service keys are either new-style secrets or legacy JWTs
_KNOWN_KEY_PREFIXES = ("sb_secret_", "eyJ")


class SupabaseStorageClient(IObjectStorage):
    """IObjectStorage implementation over httpx.

    The httpx.AsyncClient is owned by the caller (application lifespan) so connections
    are pooled across requests and closed once at shutdown.
    """

    def __init__(
        self, settings: ObjectStorageSettings, client: httpx.AsyncClient
    ) -> None:
        if not settings.is_configured:
            raise ConfigurationError("Object storage URL and service key are required")
        self.settings = settings
        self._client = client
        self._key = settings.service_key.strip()
        if not self._key.startswith(_KNOWN_KEY_PREFIXES):
            logger.warning(
                "SUPABASE_SERVICE_KEY has an unexpected format "
                "(expected sb_secret_... or a JWT starting with eyJ)"
            )

    @property
    def bucket(self) -> str:
        return self.settings.bucket

    def object_url(self, key: str) -> str:
        return f"{self.settings.base_url}/storage/v1/object/{self._path(key)}"

    def public_url(self, key: str) -> str:
        return f"{self.settings.base_url}/storage/v1/object/public/{self._path(key)}"

    def _path(self, key: str) -> str:
        return f"{quote(self.bucket)}/{quote(key)}"

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._key}",
            "apikey": self._key,
        }
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        """Upsert bytes under bucket/key and return the public URL.

        Raises:
            StorageFailureError: transport error or non-2xx response
        """
        url = self.object_url(key)
        headers = self._headers(content_type)
        headers["x-upsert"] = "true"

        try:
            response = await self._client.post(url, content=data, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Object storage upload failed for %s: %s", key, e)
            raise StorageFailureError(
                f"Object storage upload failed: {e}", backend="object_storage"
            ) from e

        if not response.is_success:
            logger.error(
                "Object storage upload rejected: %d %s",
                response.status_code,
                response.text[:500],
                extra={"upload_url": url, "status_code": response.status_code},
            )
            raise StorageFailureError(
                f"Object storage upload rejected ({response.status_code}): "
                f"{response.text[:200]}",
                backend="object_storage",
            )

        logger.info("Uploaded %s to bucket %s (%d bytes)", key, self.bucket, len(data))
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        """Delete the object under bucket/key. A missing object counts as deleted."""
        url = self.object_url(key)
        try:
            response = await self._client.delete(url, headers=self._headers())
        except httpx.HTTPError as e:
            raise StorageFailureError(
                f"Object storage delete failed: {e}", backend="object_storage"
            ) from e

        if response.status_code == 404:
            logger.debug("Object %s already gone", key)
            return
        if not response.is_success:
            raise StorageFailureError(
                f"Object storage delete rejected ({response.status_code}): "
                f"{response.text[:200]}",
                backend="object_storage",
            )
        logger.info("Deleted %s from bucket %s", key, self.bucket)
