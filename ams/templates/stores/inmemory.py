"""In-memory implementation of VersionStore."""

from ams.db.errors import ConflictError
from ams.templates.cache import ContentCache
from ams.templates.models import TemplateVersion
from ams.templates.store import VersionStore


class InMemoryVersionStore(VersionStore):
    """In-memory implementation of VersionStore for testing and development.

    Uses dict storage keyed by ``(template_id, version)``.
    """

    def __init__(self, cache: ContentCache | None = None) -> None:
        super().__init__(cache)
        self._templates: set[str] = set()
        self._versions: dict[tuple[str, str], TemplateVersion] = {}

    async def ensure_template(self, template_id: str) -> None:
        self._templates.add(template_id)

    async def insert_version(self, record: TemplateVersion) -> None:
        key = (record.template_id, record.version)
        if key in self._versions:
            raise ConflictError(f"Version {record.version} of {record.template_id} exists")
        self._versions[key] = record

    async def clear_latest(self, template_id: str, keep_version: str) -> None:
        for (tid, version), record in list(self._versions.items()):
            if tid != template_id:
                continue
            is_latest = version == keep_version
            if record.is_latest != is_latest:
                self._versions[(tid, version)] = record.model_copy(
                    update={"is_latest": is_latest}
                )

    async def get_version(self, template_id: str, version: str) -> TemplateVersion | None:
        return self._versions.get((template_id, version))

    async def get_latest(self, template_id: str) -> TemplateVersion | None:
        for (tid, _), record in self._versions.items():
            if tid == template_id and record.is_latest:
                return record
        return None

    async def list_versions(self, template_id: str) -> list[str]:
        return [version for (tid, version) in self._versions if tid == template_id]
