"""Template validation and publication."""

from pydantic import BaseModel

from ams.agentfile.models import ValidationReport
from ams.agentfile.parser import checksum, parse_agent_file, validate_agent_file
from ams.agentfile.semver import assess
from ams.errors import ErrorKind, Failure, is_failure
from ams.idempotency.guard import IdempotencyGuard
from ams.observability.logging import get_logger
from ams.observability.metrics import TEMPLATE_PUBLISHES
from ams.templates.models import PublishResult, TemplateVersion
from ams.templates.store import VersionStore

logger = get_logger(__name__)


class ValidationResult(BaseModel):
    """Outcome of validating an Agent File without publishing it."""

    format: str
    validation: ValidationReport


class TemplateService:
    """Publishes Agent Files as immutable template versions."""

    def __init__(self, store: VersionStore, guard: IdempotencyGuard) -> None:
        self._store = store
        self._guard = guard

    async def validate(self, raw: str) -> ValidationResult | Failure:
        """Parse and validate. Never persists anything."""
        parsed = parse_agent_file(raw)
        if is_failure(parsed):
            return parsed
        return ValidationResult(
            format=parsed.format,
            validation=validate_agent_file(parsed.agent_file),
        )

    async def publish(
        self,
        raw: str,
        idempotency_key: str | None = None,
        published_by: str | None = None,
    ) -> PublishResult | Failure:
        """Publish raw Agent File content as a new version of its template.

        Order: idempotency guard, parse, validate, SemVer gate, store.
        """
        result = await self._publish(raw, idempotency_key, published_by)
        outcome = result.kind.value.lower() if is_failure(result) else "published"
        TEMPLATE_PUBLISHES.labels(outcome=outcome).inc()
        return result

    async def _publish(
        self,
        raw: str,
        idempotency_key: str | None,
        published_by: str | None,
    ) -> PublishResult | Failure:
        check = await self._guard.check(idempotency_key, raw)
        rejected = check.failure()
        if rejected is not None:
            return rejected

        parsed = parse_agent_file(raw)
        if is_failure(parsed):
            return parsed

        agent_file = parsed.agent_file
        report = validate_agent_file(agent_file)
        if not report.valid:
            return Failure.of(
                ErrorKind.VALIDATION_ERROR,
                "Validation failed",
                errors=report.errors,
            )

        template_id = agent_file.template.id
        version = agent_file.template.version
        existing = await self._store.list_versions(template_id)
        assessment = assess(version, existing)
        if not assessment.allowed:
            logger.info(
                "template_publish_rejected",
                template_id=template_id,
                version=version,
                kind=assessment.kind.value,
            )
            return Failure.of(
                assessment.kind,
                assessment.reason,
                template_id=template_id,
                version=version,
            )

        published = await self._store.publish(
            template_id,
            version,
            raw,
            checksum(raw),
            migrations=agent_file.migration_edges(),
            published_by=published_by,
        )
        if is_failure(published):
            return published
        return published.model_copy(update={"format": parsed.format})

    async def resolve(
        self,
        template_id: str,
        version: str | None = None,
        use_latest: bool = False,
    ) -> TemplateVersion | Failure:
        return await self._store.resolve(template_id, version=version, use_latest=use_latest)
