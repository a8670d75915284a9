"""Configuration model exports.

    from ams.config.models import StorageConfig, UpstreamConfig
"""

from ams.config.models.api import APIConfig
from ams.config.models.observability import LoggingConfig, ObservabilityConfig
from ams.config.models.storage import StorageConfig
from ams.config.models.upstream import (
    BillingConfig,
    CacheConfig,
    QueueConfig,
    UpstreamConfig,
)

__all__ = [
    "APIConfig",
    "BillingConfig",
    "CacheConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "QueueConfig",
    "StorageConfig",
    "UpstreamConfig",
]
