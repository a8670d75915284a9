"""Fixtures for API tests: the full app wired to in-memory backends."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ams.api.app import create_app
from ams.api.dependencies import (
    get_attempt_store,
    get_dedup_store,
    get_instance_api,
    get_instance_store,
    get_profile_store,
    get_upgrade_queue,
    get_version_store,
)
from ams.config import Settings, get_settings
from ams.idempotency.stores.inmemory import InMemoryDedupStore
from ams.instances.client import InMemoryInstanceAPI
from ams.instances.stores.inmemory import InMemoryInstanceStore, InMemoryProfileStore
from ams.jobs.queue import InMemoryUpgradeQueue
from ams.migration.stores.inmemory import InMemoryMigrationAttemptStore
from ams.templates.stores.inmemory import InMemoryVersionStore

BILLING_URL = "https://billing.example.com"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage={"backend": "inmemory"},
        cache={"backend": "disabled"},
        queue={"backend": "inmemory"},
        billing={"proxy_base_url": BILLING_URL},
        observability={"logging": {"level": "WARNING", "format": "json"}},
    )


@pytest.fixture
def version_store() -> InMemoryVersionStore:
    return InMemoryVersionStore()


@pytest.fixture
def instance_store() -> InMemoryInstanceStore:
    return InMemoryInstanceStore()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def attempt_store() -> InMemoryMigrationAttemptStore:
    return InMemoryMigrationAttemptStore()


@pytest.fixture
def instance_api() -> InMemoryInstanceAPI:
    return InMemoryInstanceAPI()


@pytest.fixture
def upgrade_queue() -> InMemoryUpgradeQueue:
    return InMemoryUpgradeQueue()


@pytest.fixture
def app(
    settings,
    version_store,
    instance_store,
    profile_store,
    attempt_store,
    instance_api,
    upgrade_queue,
) -> FastAPI:
    """Create a test FastAPI application."""
    app = create_app(settings)

    dedup_store = InMemoryDedupStore()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_version_store] = lambda: version_store
    app.dependency_overrides[get_instance_store] = lambda: instance_store
    app.dependency_overrides[get_profile_store] = lambda: profile_store
    app.dependency_overrides[get_attempt_store] = lambda: attempt_store
    app.dependency_overrides[get_dedup_store] = lambda: dedup_store
    app.dependency_overrides[get_instance_api] = lambda: instance_api
    app.dependency_overrides[get_upgrade_queue] = lambda: upgrade_queue
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def user_headers() -> dict[str, str]:
    return {"X-User-Id": "user-1"}
