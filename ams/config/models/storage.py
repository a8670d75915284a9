"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]


class StorageConfig(BaseModel):
    """Relational store configuration shared by all stores."""

    backend: BackendType = Field(
        default="postgres",
        description="Store backend type",
    )
    dsn: str | None = Field(
        default=None,
        description="PostgreSQL DSN (falls back to AMS_DATABASE_URL / DATABASE_URL)",
    )
    min_pool_size: int = Field(
        default=2,
        gt=0,
        description="Minimum connections to keep open",
    )
    max_pool_size: int = Field(
        default=10,
        gt=0,
        description="Maximum connections in pool",
    )
    max_inactive_connection_lifetime: float = Field(
        default=300.0,
        gt=0,
        description="Close connections idle longer than this (seconds)",
    )
    command_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Default timeout for queries (seconds)",
    )
