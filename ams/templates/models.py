"""Template version models."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from ams.migration.models import MigrationEdge


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class TemplateVersion(BaseModel):
    """An immutable published version of a template.

    ``content`` and ``checksum`` never change once stored; only
    ``is_latest`` flips when a newer version is published.
    """

    template_id: str
    version: str
    content: str
    checksum: str
    is_latest: bool = False
    migrations: list[MigrationEdge] = Field(default_factory=list)
    published_by: str | None = None
    published_at: datetime = Field(default_factory=utc_now)


class PublishResult(BaseModel):
    """Outcome of a successful publish."""

    template_id: str
    version: str
    checksum: str
    is_latest: bool = True
    format: str | None = None
