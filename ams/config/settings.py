"""Root settings model for AMS configuration."""

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from ams.config.models.api import APIConfig
from ams.config.models.observability import ObservabilityConfig
from ams.config.models.storage import StorageConfig
from ams.config.models.upstream import (
    BillingConfig,
    CacheConfig,
    QueueConfig,
    UpstreamConfig,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration consumed by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the merged TOML files."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml
    3. config/{AMS_ENV}.toml
    4. AMS_* environment variables, e.g. ``AMS_UPSTREAM__API_KEY``
    """

    model_config = SettingsConfigDict(
        env_prefix="AMS_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="ams", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")

    api: APIConfig = Field(default_factory=APIConfig, description="HTTP server configuration")
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Relational store configuration",
    )
    upstream: UpstreamConfig = Field(
        default_factory=UpstreamConfig,
        description="Remote agent API configuration",
    )
    billing: BillingConfig = Field(
        default_factory=BillingConfig,
        description="Billing proxy configuration",
    )
    cache: CacheConfig = Field(
        default_factory=CacheConfig,
        description="Agent File content cache configuration",
    )
    queue: QueueConfig = Field(
        default_factory=QueueConfig,
        description="Deferred upgrade queue configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Logging configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: constructor args, then AMS_* env vars, then TOML."""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
