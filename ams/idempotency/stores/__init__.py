"""DedupStore implementations."""

from ams.idempotency.stores.inmemory import InMemoryDedupStore
from ams.idempotency.stores.postgres import PostgresDedupStore

__all__ = ["InMemoryDedupStore", "PostgresDedupStore"]
