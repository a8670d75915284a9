"""Instance creation and upgrade orchestration.

Create: idempotency guard, resolve template, check variables, build the
remote config, create the remote agent, record the instance and link it
to the owner's profile.

Upgrade: idempotency guard, load instance, owner check, resolve target,
plan over the target's declared migrations, fetch the current remote
config, simulate, then hand off to the dispatcher.

The billing endpoint arrives precomputed from the HTTP layer.
"""

from ams.agentfile.parser import build_agent_config, parse_agent_file, validate_variables
from ams.errors import ErrorKind, Failure, is_failure
from ams.idempotency.guard import IdempotencyGuard
from ams.instances.client import InstanceAPI, UpstreamError
from ams.instances.models import (
    AgentInstance,
    CreateInstanceRequest,
    CreateInstanceResult,
    UpgradeInstanceRequest,
    UserProfile,
)
from ams.instances.store import InstanceStore, ProfileStore
from ams.migration.dispatcher import DispatchOutcome, DispatchRequest, UpgradeDispatcher
from ams.migration.dry_run import simulate
from ams.migration.models import MigrationGraph
from ams.migration.planner import plan
from ams.observability.logging import get_logger
from ams.templates.store import VersionStore

logger = get_logger(__name__)


class InstanceService:
    """Creates and upgrades live agents."""

    def __init__(
        self,
        versions: VersionStore,
        instances: InstanceStore,
        profiles: ProfileStore,
        instance_api: InstanceAPI,
        dispatcher: UpgradeDispatcher,
        guard: IdempotencyGuard,
    ) -> None:
        self._versions = versions
        self._instances = instances
        self._profiles = profiles
        self._api = instance_api
        self._dispatcher = dispatcher
        self._guard = guard

    async def create_instance(
        self,
        request: CreateInstanceRequest,
        user_id: str,
        endpoint: str,
        idempotency_key: str | None = None,
    ) -> CreateInstanceResult | Failure:
        check = await self._guard.check(
            idempotency_key,
            {"payload": request.model_dump(mode="json", exclude_unset=True), "user_id": user_id},
        )
        rejected = check.failure()
        if rejected is not None:
            return rejected

        template = await self._versions.resolve(
            request.template_id,
            version=request.version,
            use_latest=request.use_latest,
        )
        if is_failure(template):
            return template

        parsed = parse_agent_file(template.content)
        if is_failure(parsed):
            return parsed
        agent_file = parsed.agent_file

        missing = validate_variables(agent_file, request.variables)
        if missing is not None:
            return missing

        config = build_agent_config(agent_file, endpoint, name=request.agent_name)
        try:
            agent = await self._api.create(config)
        except UpstreamError as e:
            logger.warning(
                "instance_create_failed",
                template_id=template.template_id,
                version=template.version,
                status=e.status,
            )
            return e.to_failure()

        agent_id = agent.get("id")
        if not agent_id:
            return Failure.of(
                ErrorKind.UPSTREAM_ERROR,
                "Upstream create returned no agent id",
                body=agent,
            )

        await self._instances.save(
            AgentInstance(
                agent_id=str(agent_id),
                user_id=user_id,
                template_id=template.template_id,
                version=template.version,
                variables=request.variables,
            )
        )
        await self._profiles.link_agent(user_id, str(agent_id))

        logger.info(
            "instance_created",
            agent_id=agent_id,
            template_id=template.template_id,
            version=template.version,
        )
        return CreateInstanceResult(agent=agent, template_checksum=template.checksum)

    async def upgrade_instance(
        self,
        agent_id: str,
        request: UpgradeInstanceRequest,
        user_id: str,
        endpoint: str,
        idempotency_key: str | None = None,
    ) -> DispatchOutcome | Failure:
        check = await self._guard.check(
            idempotency_key,
            {"payload": request.model_dump(mode="json", exclude_unset=True), "agent_id": agent_id},
        )
        rejected = check.failure()
        if rejected is not None:
            return rejected

        instance = await self._instances.get(agent_id)
        if instance is None:
            return Failure.of(ErrorKind.NOT_FOUND, "Agent not found", agent_id=agent_id)

        if user_id != instance.user_id:
            logger.warning("instance_upgrade_forbidden", agent_id=agent_id)
            return Failure.of(ErrorKind.FORBIDDEN, "Forbidden", agent_id=agent_id)

        use_latest = request.selects_latest
        target = await self._versions.resolve(
            instance.template_id,
            version=request.target_version,
            use_latest=use_latest,
        )
        if is_failure(target):
            return target

        graph = MigrationGraph.from_edges(target.migrations)
        if is_failure(graph):
            return graph

        steps = plan(instance.version, target.version, graph)
        if is_failure(steps):
            return steps

        try:
            current_config = await self._api.fetch(agent_id)
        except UpstreamError as e:
            return e.to_failure()

        result = simulate(steps, current_config, endpoint)
        if is_failure(result):
            return result

        return await self._dispatcher.dispatch(
            DispatchRequest(
                instance=instance,
                to_version=target.version,
                plan=steps,
                result=result,
                dry_run=request.dry_run,
                use_queue=request.use_queue,
            )
        )

    async def get_profile(self, user_id: str) -> UserProfile | None:
        return await self._profiles.get(user_id)
