"""MigrationAttemptStore implementations."""

from ams.migration.stores.inmemory import InMemoryMigrationAttemptStore
from ams.migration.stores.postgres import PostgresMigrationAttemptStore

__all__ = [
    "InMemoryMigrationAttemptStore",
    "PostgresMigrationAttemptStore",
]
