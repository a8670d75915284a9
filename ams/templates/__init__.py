"""Template versions: storage, content cache and publication."""

from ams.templates.cache import (
    CacheWriteError,
    ContentCache,
    HttpContentCache,
    InMemoryContentCache,
    NullContentCache,
)
from ams.templates.models import PublishResult, TemplateVersion
from ams.templates.store import VersionStore

__all__ = [
    "CacheWriteError",
    "ContentCache",
    "HttpContentCache",
    "InMemoryContentCache",
    "NullContentCache",
    "PublishResult",
    "TemplateVersion",
    "VersionStore",
]
