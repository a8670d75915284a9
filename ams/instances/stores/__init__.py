"""InstanceStore and ProfileStore implementations."""

from ams.instances.stores.inmemory import InMemoryInstanceStore, InMemoryProfileStore
from ams.instances.stores.postgres import PostgresInstanceStore, PostgresProfileStore

__all__ = [
    "InMemoryInstanceStore",
    "InMemoryProfileStore",
    "PostgresInstanceStore",
    "PostgresProfileStore",
]
