"""Dependency injection for API routes.

Provides FastAPI dependencies for stores, adapters and services. Backends
are chosen from settings; every dependency can be overridden for testing
through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from ams.api.exceptions import ServiceMisconfiguredError
from ams.api.middleware.auth import get_user_id
from ams.config import Settings, get_settings
from ams.db.pool import PostgresPool
from ams.idempotency.guard import IdempotencyGuard
from ams.idempotency.store import DedupStore
from ams.idempotency.stores.inmemory import InMemoryDedupStore
from ams.idempotency.stores.postgres import PostgresDedupStore
from ams.instances.client import InMemoryInstanceAPI, InstanceAPI, LettaInstanceAPI
from ams.instances.service import InstanceService
from ams.instances.store import InstanceStore, ProfileStore
from ams.instances.stores.inmemory import InMemoryInstanceStore, InMemoryProfileStore
from ams.instances.stores.postgres import PostgresInstanceStore, PostgresProfileStore
from ams.jobs.queue import InMemoryUpgradeQueue, PgmqUpgradeQueue, UpgradeQueue
from ams.migration.dispatcher import UpgradeDispatcher
from ams.migration.store import MigrationAttemptStore
from ams.migration.stores.inmemory import InMemoryMigrationAttemptStore
from ams.migration.stores.postgres import PostgresMigrationAttemptStore
from ams.observability.logging import get_logger
from ams.templates.cache import (
    ContentCache,
    HttpContentCache,
    InMemoryContentCache,
    NullContentCache,
)
from ams.templates.service import TemplateService
from ams.templates.store import VersionStore
from ams.templates.stores.inmemory import InMemoryVersionStore
from ams.templates.stores.postgres import PostgresVersionStore

logger = get_logger(__name__)

# Connection pool shared by all PostgreSQL stores
_postgres_pool: PostgresPool | None = None

# Instances created once and reused
_content_cache: ContentCache | None = None
_version_store: VersionStore | None = None
_instance_store: InstanceStore | None = None
_profile_store: ProfileStore | None = None
_attempt_store: MigrationAttemptStore | None = None
_dedup_store: DedupStore | None = None
_upgrade_queue: UpgradeQueue | None = None
_instance_api: InstanceAPI | None = None


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_postgres_pool(settings: SettingsDep) -> PostgresPool:
    """Get the shared PostgreSQL pool. It connects lazily on first acquire."""
    global _postgres_pool
    if _postgres_pool is None:
        _postgres_pool = PostgresPool.from_config(settings.storage)
    return _postgres_pool


def _uses_postgres(settings: Settings) -> bool:
    return settings.storage.backend == "postgres"


def get_content_cache(settings: SettingsDep) -> ContentCache:
    global _content_cache
    if _content_cache is None:
        backend = settings.cache.backend
        if backend == "http":
            _content_cache = HttpContentCache.from_config(settings.cache)
        elif backend == "inmemory":
            _content_cache = InMemoryContentCache()
        else:
            _content_cache = NullContentCache()
        logger.info("content_cache_initialized", backend=backend)
    return _content_cache


def get_version_store(
    settings: SettingsDep,
    cache: Annotated[ContentCache, Depends(get_content_cache)],
) -> VersionStore:
    global _version_store
    if _version_store is None:
        if _uses_postgres(settings):
            _version_store = PostgresVersionStore(get_postgres_pool(settings), cache=cache)
        else:
            _version_store = InMemoryVersionStore(cache=cache)
        logger.info("version_store_initialized", store_type=settings.storage.backend)
    return _version_store


def get_instance_store(settings: SettingsDep) -> InstanceStore:
    global _instance_store
    if _instance_store is None:
        if _uses_postgres(settings):
            _instance_store = PostgresInstanceStore(get_postgres_pool(settings))
        else:
            _instance_store = InMemoryInstanceStore()
        logger.info("instance_store_initialized", store_type=settings.storage.backend)
    return _instance_store


def get_profile_store(settings: SettingsDep) -> ProfileStore:
    global _profile_store
    if _profile_store is None:
        if _uses_postgres(settings):
            _profile_store = PostgresProfileStore(get_postgres_pool(settings))
        else:
            _profile_store = InMemoryProfileStore()
    return _profile_store


def get_attempt_store(settings: SettingsDep) -> MigrationAttemptStore:
    global _attempt_store
    if _attempt_store is None:
        if _uses_postgres(settings):
            _attempt_store = PostgresMigrationAttemptStore(get_postgres_pool(settings))
        else:
            _attempt_store = InMemoryMigrationAttemptStore()
    return _attempt_store


def get_dedup_store(settings: SettingsDep) -> DedupStore:
    global _dedup_store
    if _dedup_store is None:
        if _uses_postgres(settings):
            _dedup_store = PostgresDedupStore(get_postgres_pool(settings))
        else:
            _dedup_store = InMemoryDedupStore()
    return _dedup_store


def get_upgrade_queue(settings: SettingsDep) -> UpgradeQueue:
    global _upgrade_queue
    if _upgrade_queue is None:
        if settings.queue.backend == "pgmq":
            _upgrade_queue = PgmqUpgradeQueue.from_config(
                get_postgres_pool(settings), settings.queue
            )
        else:
            _upgrade_queue = InMemoryUpgradeQueue(batch_size=settings.queue.batch_size)
        logger.info("upgrade_queue_initialized", backend=settings.queue.backend)
    return _upgrade_queue


def get_instance_api(settings: SettingsDep) -> InstanceAPI:
    """Get the remote instance API.

    Without an upstream API key the in-memory stand-in is used, which only
    makes sense with the in-memory storage backend.
    """
    global _instance_api
    if _instance_api is None:
        if settings.upstream.api_key is None and not _uses_postgres(settings):
            _instance_api = InMemoryInstanceAPI()
            logger.warning("instance_api_inmemory", reason="no upstream api key")
        else:
            _instance_api = LettaInstanceAPI.from_config(settings.upstream)
            logger.info("instance_api_initialized", base_url=settings.upstream.base_url)
    return _instance_api


VersionStoreDep = Annotated[VersionStore, Depends(get_version_store)]
InstanceStoreDep = Annotated[InstanceStore, Depends(get_instance_store)]
ProfileStoreDep = Annotated[ProfileStore, Depends(get_profile_store)]
AttemptStoreDep = Annotated[MigrationAttemptStore, Depends(get_attempt_store)]
DedupStoreDep = Annotated[DedupStore, Depends(get_dedup_store)]
UpgradeQueueDep = Annotated[UpgradeQueue, Depends(get_upgrade_queue)]
InstanceAPIDep = Annotated[InstanceAPI, Depends(get_instance_api)]


def get_idempotency_guard(store: DedupStoreDep) -> IdempotencyGuard:
    return IdempotencyGuard(store)


IdempotencyGuardDep = Annotated[IdempotencyGuard, Depends(get_idempotency_guard)]


def get_dispatcher(
    instances: InstanceStoreDep,
    attempts: AttemptStoreDep,
    instance_api: InstanceAPIDep,
    queue: UpgradeQueueDep,
) -> UpgradeDispatcher:
    return UpgradeDispatcher(instances, attempts, instance_api, queue=queue)


def get_template_service(
    store: VersionStoreDep,
    guard: IdempotencyGuardDep,
) -> TemplateService:
    return TemplateService(store, guard)


def get_instance_service(
    versions: VersionStoreDep,
    instances: InstanceStoreDep,
    profiles: ProfileStoreDep,
    instance_api: InstanceAPIDep,
    dispatcher: Annotated[UpgradeDispatcher, Depends(get_dispatcher)],
    guard: IdempotencyGuardDep,
) -> InstanceService:
    return InstanceService(versions, instances, profiles, instance_api, dispatcher, guard)


def get_billing_endpoint(
    settings: SettingsDep,
    user_id: Annotated[str, Depends(get_user_id)],
) -> str:
    """Billing proxy endpoint for the caller.

    Raises:
        ServiceMisconfiguredError: If no proxy base URL is configured
    """
    try:
        return settings.billing.endpoint_for(user_id)
    except ValueError as e:
        raise ServiceMisconfiguredError(str(e)) from e


TemplateServiceDep = Annotated[TemplateService, Depends(get_template_service)]
InstanceServiceDep = Annotated[InstanceService, Depends(get_instance_service)]
UserIdDep = Annotated[str, Depends(get_user_id)]
BillingEndpointDep = Annotated[str, Depends(get_billing_endpoint)]


async def reset_dependencies() -> None:
    """Close shared clients and drop cached instances.

    Called on application shutdown and between tests.
    """
    global _postgres_pool, _content_cache, _version_store, _instance_store
    global _profile_store, _attempt_store, _dedup_store, _upgrade_queue, _instance_api

    if _instance_api is not None:
        await _instance_api.close()
    if _content_cache is not None:
        await _content_cache.close()
    if _postgres_pool is not None:
        await _postgres_pool.close()

    _postgres_pool = None
    _content_cache = None
    _version_store = None
    _instance_store = None
    _profile_store = None
    _attempt_store = None
    _dedup_store = None
    _upgrade_queue = None
    _instance_api = None
