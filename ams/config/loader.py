"""Layered TOML configuration.

Layers, later ones winning:

1. ``default.toml``, required
2. ``{AMS_ENV}.toml``, e.g. ``development.toml`` or ``production.toml``
3. ``local.toml``, optional untracked per-machine overrides

Environment variables (``AMS_STORAGE__DSN`` and friends) are applied on top
by ``Settings`` and are not handled here.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "AMS_CONFIG_DIR"
ENV_VAR = "AMS_ENV"
DEFAULT_ENV = "development"
LOCAL_LAYER = "local.toml"


def get_environment() -> str:
    return os.environ.get(ENV_VAR, DEFAULT_ENV)


def get_config_dir(start: Path | None = None) -> Path:
    """Locate the directory holding ``default.toml``.

    AMS_CONFIG_DIR is used as-is when set. Otherwise ``config/`` is looked
    up from ``start`` (the working directory by default) through its
    parents, so commands run from a subdirectory of the checkout still find
    the repository config.

    Raises:
        FileNotFoundError: If AMS_CONFIG_DIR points at a missing directory
    """
    explicit = os.environ.get(CONFIG_DIR_VAR)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {explicit}")
        return path

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / "config"
        if (candidate / "default.toml").is_file():
            return candidate

    return Path("config")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def config_layers(config_dir: Path, env: str) -> list[Path]:
    """Existing layer files for ``env`` in merge order.

    Raises:
        FileNotFoundError: If ``default.toml`` is missing
    """
    default = config_dir / "default.toml"
    if not default.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default}. "
            f"Create config/default.toml or set {CONFIG_DIR_VAR}."
        )

    layers = [default]
    for name in (f"{env}.toml", LOCAL_LAYER):
        path = config_dir / name
        if path.is_file() and path not in layers:
            layers.append(path)
    return layers


def load_config(config_dir: Path | None = None, env: str | None = None) -> dict[str, Any]:
    """Read and merge every layer for the active environment.

    Raises:
        FileNotFoundError: If ``default.toml`` is missing
        tomllib.TOMLDecodeError: If a layer is not valid TOML
    """
    config: dict[str, Any] = {}
    for path in config_layers(config_dir or get_config_dir(), env or get_environment()):
        with path.open("rb") as f:
            config = deep_merge(config, tomllib.load(f))
    return config
