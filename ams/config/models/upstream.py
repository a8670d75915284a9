"""Configuration for the collaborators outside the core.

Remote agent API, billing proxy, content cache and the deferred upgrade
queue. Secrets are expected from environment variables, never from TOML.
"""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr


class UpstreamConfig(BaseModel):
    """Remote agent (Letta) API configuration."""

    base_url: str = Field(
        default="https://api.letta.com",
        description="Base URL of the agent API",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Bearer token (from AMS_UPSTREAM__API_KEY)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout",
    )


class BillingConfig(BaseModel):
    """Billing proxy that every agent's model/embedding traffic is routed through."""

    proxy_base_url: str | None = Field(
        default=None,
        description="Base URL of the billing proxy (required for create/upgrade)",
    )

    def endpoint_for(self, user_id: str) -> str:
        """Build the per-owner proxy endpoint.

        Raises:
            ValueError: If no proxy base URL is configured
        """
        if not self.proxy_base_url:
            raise ValueError("Missing billing proxy base URL")
        return f"{self.proxy_base_url.rstrip('/')}/api/v1/agents/{user_id}/messages"


class CacheConfig(BaseModel):
    """Best-effort Agent File content cache."""

    backend: Literal["inmemory", "http", "disabled"] = Field(
        default="disabled",
        description="Cache backend",
    )
    base_url: str | None = Field(
        default=None,
        description="Storage service base URL",
    )
    bucket: str = Field(default="af-templates", description="Bucket name")
    service_key: SecretStr | None = Field(
        default=None,
        description="Storage service key (from AMS_CACHE__SERVICE_KEY)",
    )
    timeout_seconds: float = Field(default=5.0, gt=0, description="Upload timeout")


class QueueConfig(BaseModel):
    """Deferred upgrade queue."""

    backend: Literal["inmemory", "pgmq"] = Field(
        default="pgmq",
        description="Queue backend",
    )
    name: str = Field(default="upgrade_jobs", description="Queue name")
    visibility_timeout_seconds: int = Field(
        default=600,
        gt=0,
        description="Seconds before an unacknowledged job is considered stalled",
    )
    batch_size: int = Field(default=100, gt=0, description="Messages read per batch")
