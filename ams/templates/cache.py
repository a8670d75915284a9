"""Best-effort content cache for published Agent Files.

Objects are stored at ``<template_id>/<version>.af``. Failures raise
``CacheWriteError``; callers log and continue.
"""

from abc import ABC, abstractmethod

import httpx

from ams.config.models.upstream import CacheConfig
from ams.observability.logging import get_logger

logger = get_logger(__name__)


class CacheWriteError(Exception):
    """Raised when a cache write fails."""


def object_path(template_id: str, version: str) -> str:
    return f"{template_id}/{version}.af"


class ContentCache(ABC):
    """Mirror of raw Agent File content keyed by template and version."""

    @abstractmethod
    async def put(self, template_id: str, version: str, content: str) -> None:
        """Store content, overwriting any existing object."""
        pass

    async def close(self) -> None:  # noqa: B027
        """Release any held connections."""


class NullContentCache(ContentCache):
    """Cache that stores nothing."""

    async def put(self, template_id: str, version: str, content: str) -> None:
        return None


class InMemoryContentCache(ContentCache):
    """In-memory cache for testing and development."""

    def __init__(self) -> None:
        self.objects: dict[str, str] = {}

    async def put(self, template_id: str, version: str, content: str) -> None:
        self.objects[object_path(template_id, version)] = content

    def get(self, template_id: str, version: str) -> str | None:
        return self.objects.get(object_path(template_id, version))


class HttpContentCache(ContentCache):
    """Storage-bucket cache speaking the Supabase storage REST API."""

    def __init__(
        self,
        base_url: str,
        bucket: str = "af-templates",
        service_key: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bucket = bucket
        self._service_key = service_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpContentCache":
        if not config.base_url:
            raise ValueError("cache.base_url is required for the http cache backend")
        return cls(
            base_url=config.base_url,
            bucket=config.bucket,
            service_key=config.service_key.get_secret_value() if config.service_key else None,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/x-yaml",
            "x-upsert": "true",
        }
        if self._service_key:
            headers["Authorization"] = f"Bearer {self._service_key}"
            headers["apikey"] = self._service_key
        return headers

    async def put(self, template_id: str, version: str, content: str) -> None:
        path = object_path(template_id, version)
        try:
            response = await self._client.post(
                f"/storage/v1/object/{self._bucket}/{path}",
                content=content.encode("utf-8"),
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise CacheWriteError(f"Cache upload of {path} failed: {e}") from e

        if response.status_code >= 400:
            raise CacheWriteError(
                f"Cache upload of {path} failed with status {response.status_code}"
            )
        logger.debug("content_cached", path=path, bucket=self._bucket)
