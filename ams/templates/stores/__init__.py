"""VersionStore implementations."""

from ams.templates.stores.inmemory import InMemoryVersionStore
from ams.templates.stores.postgres import PostgresVersionStore

__all__ = ["InMemoryVersionStore", "PostgresVersionStore"]
