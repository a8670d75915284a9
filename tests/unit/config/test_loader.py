"""Unit tests for TOML configuration loading."""

from pathlib import Path

import pytest

from ams.config import get_settings
from ams.config.loader import (
    config_layers,
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
)


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_merge_nested_dicts(self) -> None:
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        override = {"a": {"y": 20, "z": 30}}

        assert deep_merge(base, override) == {"a": {"x": 1, "y": 20, "z": 30}, "b": 3}

    def test_override_replaces_non_dict(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": "replaced"}) == {"a": "replaced"}

    def test_base_unmodified(self) -> None:
        base = {"a": 1}
        deep_merge(base, {"b": 2})
        assert base == {"a": 1}


class TestLoadConfig:
    def test_environment_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("AMS_ENV", raising=False)
        assert get_environment() == "development"

    def test_config_dir_from_env(
        self, monkeypatch: pytest.MonkeyPatch, test_config_dir: Path
    ) -> None:
        monkeypatch.setenv("AMS_CONFIG_DIR", str(test_config_dir))
        assert get_config_dir() == test_config_dir

    def test_missing_config_dir_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AMS_CONFIG_DIR", "/nonexistent/ams-config")
        with pytest.raises(FileNotFoundError):
            get_config_dir()

    def test_environment_overlay(
        self, monkeypatch: pytest.MonkeyPatch, test_config_dir: Path, mock_toml_files
    ) -> None:
        mock_toml_files({
            "default.toml": '[storage]\nbackend = "postgres"\nmax_pool_size = 10\n',
            "staging.toml": '[storage]\nbackend = "inmemory"\n',
        })
        monkeypatch.setenv("AMS_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("AMS_ENV", "staging")

        config = load_config()

        assert config["storage"] == {"backend": "inmemory", "max_pool_size": 10}

    def test_missing_default_raises(
        self, monkeypatch: pytest.MonkeyPatch, test_config_dir: Path
    ) -> None:
        monkeypatch.setenv("AMS_CONFIG_DIR", str(test_config_dir))
        with pytest.raises(FileNotFoundError):
            load_config()

    def test_local_layer_wins(self, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({
            "default.toml": "[queue]\nbatch_size = 10\nvisibility_timeout_seconds = 60\n",
            "production.toml": "[queue]\nbatch_size = 50\n",
            "local.toml": "[queue]\nbatch_size = 1\n",
        })

        config = load_config(test_config_dir, "production")

        assert config["queue"] == {"batch_size": 1, "visibility_timeout_seconds": 60}

    def test_layers_in_merge_order(self, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({"default.toml": "", "local.toml": ""})

        layers = config_layers(test_config_dir, "staging")

        assert [p.name for p in layers] == ["default.toml", "local.toml"]

    def test_config_dir_found_from_subdirectory(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, mock_toml_files
    ) -> None:
        mock_toml_files({"default.toml": ""})
        nested = tmp_path / "ams" / "db"
        nested.mkdir(parents=True)
        monkeypatch.delenv("AMS_CONFIG_DIR", raising=False)

        assert get_config_dir(nested) == (tmp_path / "config").resolve()


class TestSettings:
    """Tests for get_settings layering."""

    def test_toml_values_loaded(
        self, monkeypatch: pytest.MonkeyPatch, test_config_dir: Path, mock_toml_files
    ) -> None:
        mock_toml_files({
            "default.toml": (
                '[billing]\nproxy_base_url = "https://proxy.internal"\n'
                '[queue]\nbackend = "inmemory"\nbatch_size = 5\n'
            ),
        })
        monkeypatch.setenv("AMS_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("AMS_ENV", "test")

        settings = get_settings()

        assert settings.billing.proxy_base_url == "https://proxy.internal"
        assert settings.queue.batch_size == 5
        assert settings.storage.backend == "postgres"

    def test_env_overrides_toml(
        self, monkeypatch: pytest.MonkeyPatch, test_config_dir: Path, mock_toml_files
    ) -> None:
        mock_toml_files({"default.toml": '[upstream]\ntimeout_seconds = 10.0\n'})
        monkeypatch.setenv("AMS_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("AMS_ENV", "test")
        monkeypatch.setenv("AMS_UPSTREAM__TIMEOUT_SECONDS", "3.5")
        monkeypatch.setenv("AMS_UPSTREAM__API_KEY", "sk-live")

        settings = get_settings()

        assert settings.upstream.timeout_seconds == 3.5
        assert settings.upstream.api_key.get_secret_value() == "sk-live"

    def test_billing_endpoint(self) -> None:
        from ams.config.models.upstream import BillingConfig

        config = BillingConfig(proxy_base_url="https://proxy.example.com/")

        assert config.endpoint_for("u1") == "https://proxy.example.com/api/v1/agents/u1/messages"
        with pytest.raises(ValueError, match="Missing billing proxy base URL"):
            BillingConfig().endpoint_for("u1")
