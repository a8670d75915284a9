"""Configuration loading for AMS.

Configuration is loaded from TOML files with environment variable overrides
and handed to components explicitly at startup.

Usage:
    from ams.config import get_settings

    settings = get_settings()
    timeout = settings.upstream.timeout_seconds
"""

from functools import lru_cache

from ams.config.loader import load_config
from ams.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance.

    A missing ``config/default.toml`` falls back to in-code defaults plus
    environment variables. Call ``get_settings.cache_clear()`` to reload.
    """
    try:
        set_toml_config(load_config())
    except FileNotFoundError:
        set_toml_config({})

    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
