"""PostgreSQL implementations of InstanceStore and ProfileStore."""

import json

from ams.db.errors import ConnectionError, NotFoundError
from ams.db.pool import PostgresPool
from ams.instances.models import AgentInstance, UserProfile
from ams.instances.store import InstanceStore, ProfileStore
from ams.observability.logging import get_logger

logger = get_logger(__name__)


class PostgresInstanceStore(InstanceStore):
    """Instance records in ``agent_instances``."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def get(self, agent_id: str) -> AgentInstance | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT agent_id, user_id, template_id, version, variables,
                           created_at, updated_at
                    FROM agent_instances
                    WHERE agent_id = $1
                    """,
                    agent_id,
                )
        except Exception as e:
            logger.error("postgres_get_instance_error", agent_id=agent_id, error=str(e))
            raise ConnectionError(f"Failed to get instance: {e}", cause=e) from e

        if row is None:
            return None
        variables = row["variables"]
        if isinstance(variables, str):
            variables = json.loads(variables)
        return AgentInstance(
            agent_id=row["agent_id"],
            user_id=row["user_id"],
            template_id=row["template_id"],
            version=row["version"],
            variables=variables or {},
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    async def save(self, instance: AgentInstance) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO agent_instances (
                        agent_id, user_id, template_id, version, variables,
                        created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7)
                    ON CONFLICT (agent_id) DO UPDATE SET
                        user_id = EXCLUDED.user_id,
                        template_id = EXCLUDED.template_id,
                        version = EXCLUDED.version,
                        variables = EXCLUDED.variables,
                        updated_at = EXCLUDED.updated_at
                    """,
                    instance.agent_id,
                    instance.user_id,
                    instance.template_id,
                    instance.version,
                    json.dumps(instance.variables),
                    instance.created_at,
                    instance.updated_at,
                )
                logger.debug(
                    "instance_saved",
                    agent_id=instance.agent_id,
                    version=instance.version,
                )
        except Exception as e:
            logger.error(
                "postgres_save_instance_error",
                agent_id=instance.agent_id,
                error=str(e),
            )
            raise ConnectionError(f"Failed to save instance: {e}", cause=e) from e

    async def update_version(self, agent_id: str, version: str) -> None:
        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(
                    """
                    UPDATE agent_instances
                    SET version = $2, updated_at = NOW()
                    WHERE agent_id = $1
                    """,
                    agent_id,
                    version,
                )
        except Exception as e:
            logger.error(
                "postgres_update_instance_version_error",
                agent_id=agent_id,
                error=str(e),
            )
            raise ConnectionError(f"Failed to update instance version: {e}", cause=e) from e

        if result == "UPDATE 0":
            raise NotFoundError(f"Instance {agent_id} not found")


class PostgresProfileStore(ProfileStore):
    """Owner profiles in ``user_profiles``."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def get(self, user_id: str) -> UserProfile | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT id, email, letta_agent_id, agent_status, name,
                           created_at, updated_at
                    FROM user_profiles
                    WHERE id = $1
                    """,
                    user_id,
                )
        except Exception as e:
            logger.error("postgres_get_profile_error", error=str(e))
            raise ConnectionError(f"Failed to get profile: {e}", cause=e) from e

        if row is None:
            return None
        return UserProfile(**dict(row))

    async def link_agent(self, user_id: str, agent_id: str) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO user_profiles (id, letta_agent_id, updated_at)
                    VALUES ($1, $2, NOW())
                    ON CONFLICT (id) DO UPDATE SET
                        letta_agent_id = EXCLUDED.letta_agent_id,
                        updated_at = NOW()
                    """,
                    user_id,
                    agent_id,
                )
        except Exception as e:
            logger.error("postgres_link_agent_error", agent_id=agent_id, error=str(e))
            raise ConnectionError(f"Failed to link agent to profile: {e}", cause=e) from e
