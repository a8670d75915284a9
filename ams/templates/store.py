"""VersionStore interface.

Backends implement the storage primitives; ``publish`` and ``resolve`` are
built on top of them so every backend shares one set of rules.
"""

from abc import ABC, abstractmethod

from ams.db.errors import ConflictError
from ams.errors import ErrorKind, Failure
from ams.migration.models import MigrationEdge
from ams.observability.logging import get_logger
from ams.observability.metrics import CACHE_WRITE_FAILURES
from ams.templates.cache import CacheWriteError, ContentCache, NullContentCache
from ams.templates.models import PublishResult, TemplateVersion

logger = get_logger(__name__)


class VersionStore(ABC):
    """Templates and their immutable versions.

    The ``(template_id, version)`` pair is unique; versions are never
    overwritten or appended to.
    """

    def __init__(self, cache: ContentCache | None = None) -> None:
        self._cache = cache or NullContentCache()

    # Storage primitives
    @abstractmethod
    async def ensure_template(self, template_id: str) -> None:
        """Create the template row if absent."""
        pass

    @abstractmethod
    async def insert_version(self, record: TemplateVersion) -> None:
        """Insert a version.

        Raises:
            ConflictError: If ``(template_id, version)`` already exists
        """
        pass

    @abstractmethod
    async def clear_latest(self, template_id: str, keep_version: str) -> None:
        """Flag ``keep_version`` as latest and every other version as not latest.

        A single atomic write, so concurrent calls leave exactly one
        latest version.
        """
        pass

    @abstractmethod
    async def get_version(self, template_id: str, version: str) -> TemplateVersion | None:
        pass

    @abstractmethod
    async def get_latest(self, template_id: str) -> TemplateVersion | None:
        pass

    @abstractmethod
    async def list_versions(self, template_id: str) -> list[str]:
        """All version strings published for a template."""
        pass

    # Operations
    async def publish(
        self,
        template_id: str,
        version: str,
        content: str,
        checksum: str,
        migrations: list[MigrationEdge] | None = None,
        published_by: str | None = None,
    ) -> PublishResult | Failure:
        """Store a new immutable version and make it the latest.

        Returns:
            PublishResult, or DUPLICATE_VERSION when the pair already exists
        """
        await self.ensure_template(template_id)

        record = TemplateVersion(
            template_id=template_id,
            version=version,
            content=content,
            checksum=checksum,
            is_latest=True,
            migrations=migrations or [],
            published_by=published_by,
        )
        try:
            await self.insert_version(record)
        except ConflictError:
            logger.info("template_version_duplicate", template_id=template_id, version=version)
            return Failure.of(
                ErrorKind.DUPLICATE_VERSION,
                f"Version {version} already published",
                template_id=template_id,
                version=version,
            )

        await self.clear_latest(template_id, keep_version=version)

        try:
            await self._cache.put(template_id, version, content)
        except CacheWriteError as e:
            CACHE_WRITE_FAILURES.inc()
            logger.warning(
                "template_cache_write_failed",
                template_id=template_id,
                version=version,
                error=str(e),
            )

        logger.info(
            "template_version_published",
            template_id=template_id,
            version=version,
            checksum=checksum,
        )
        return PublishResult(
            template_id=template_id,
            version=version,
            checksum=checksum,
            is_latest=True,
        )

    async def resolve(
        self,
        template_id: str,
        version: str | None = None,
        use_latest: bool = False,
    ) -> TemplateVersion | Failure:
        """Fetch one version by explicit version or by the latest flag.

        Exactly one selector must be given; both or neither is
        AMBIGUOUS_SELECTOR.
        """
        if version and use_latest:
            return Failure.of(
                ErrorKind.AMBIGUOUS_SELECTOR,
                "Provide either version or use_latest, not both",
                template_id=template_id,
            )
        if not version and not use_latest:
            return Failure.of(
                ErrorKind.AMBIGUOUS_SELECTOR,
                "Either version or use_latest must be provided",
                template_id=template_id,
            )

        if version:
            found = await self.get_version(template_id, version)
        else:
            found = await self.get_latest(template_id)

        if found is None:
            return Failure.of(
                ErrorKind.NOT_FOUND,
                "Template version not found",
                template_id=template_id,
                version=version,
                use_latest=use_latest,
            )
        return found
