"""Integration tests for configuration loading with layered precedence.

Exercises the real load_config() with YAML files, environment variables
and CLI overrides: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from vegalink.infrastructure.config.load import load_config
from vegalink.interfaces.cli.cli import _parse_args, build_cli_overrides

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("VEGALINK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "vegalink-test",
        "environment": "test",
        "http": {"timeout_seconds": 12.0, "user_agent": "TestAgent/1.0"},
        "logging": {"level": "DEBUG", "format": "console"},
        "cache": {"dir": str(tmp_path / "cache"), "ttl_seconds": 1800},
        "addon": {
            "provider_dir": str(tmp_path / "providers"),
            "enabled_providers": ["mylinks"],
            "subtitles_url": None,
        },
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "vegalink"
        assert config.environment == "dev"
        assert config.http.timeout_seconds == 15.0
        assert config.log_level == "INFO"
        assert config.log_format == "console"  # dev -> console
        assert config.cache_ttl_seconds == 86_400
        assert config.addon.provider_dir == Path("providers")
        assert config.addon.subtitles_url == "https://opensubtitles-v3.strem.io"
        assert config.tmdb_api_key is None

    def test_prod_derives_json_logs(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path, tmp_path: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "vegalink-test"
        assert config.http.timeout_seconds == 12.0
        assert config.http.user_agent == "TestAgent/1.0"
        assert config.log_level == "DEBUG"
        assert config.cache_ttl_seconds == 1800
        assert config.addon.provider_dir == tmp_path / "providers"
        assert config.addon.enabled_providers == ["mylinks"]
        assert config.addon.subtitles_url is None
        # section defaults survive a partial addon block
        assert config.addon.provider_timeout_seconds == 30.0

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_config(config_path=path)

    def test_invalid_timeout_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"addon": {"resolver_timeout_seconds": 0}}), encoding="utf-8")

        with pytest.raises(ValueError):
            load_config(config_path=path)


class TestEnvOverrides:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("VEGALINK_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("VEGALINK_HTTP_TIMEOUT_SECONDS", "40")
        monkeypatch.setenv("VEGALINK_PROVIDER_DIR", str(tmp_path / "env-providers"))
        monkeypatch.setenv("VEGALINK_TMDB_API_KEY", "secret")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.http.timeout_seconds == 40.0
        assert config.addon.provider_dir == tmp_path / "env-providers"
        assert config.tmdb_api_key == "secret"
        assert config.app_name == "vegalink-test"

    def test_dotenv_file_feeds_env_layer(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        dotenv = tmp_path / ".env"
        dotenv.write_text("VEGALINK_ENVIRONMENT=prod\n", encoding="utf-8")
        monkeypatch.delenv("VEGALINK_ENVIRONMENT", raising=False)

        try:
            config = load_config(dotenv_path=dotenv)
        finally:
            os.environ.pop("VEGALINK_ENVIRONMENT", None)

        assert config.environment == "prod"
        assert config.log_format == "json"

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "absent.env")


class TestCliOverrides:
    def test_cli_overrides_yaml_and_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VEGALINK_LOG_LEVEL", "WARNING")

        config = load_config(config_path=yaml_config, cli_overrides={"log_level": "ERROR"})
        assert config.log_level == "ERROR"

    def test_cli_sectioned_override(self, yaml_config: Path) -> None:
        config = load_config(
            config_path=yaml_config,
            cli_overrides={"http": {"timeout_seconds": 5.0}},
        )
        assert config.http.timeout_seconds == 5.0
        assert config.http.user_agent == "TestAgent/1.0"

    def test_command_line_flags(self, tmp_path: Path) -> None:
        args = _parse_args(
            [
                "--provider-dir",
                str(tmp_path / "cli-providers"),
                "--log-level",
                "DEBUG",
                "--log-format",
                "json",
            ]
        )

        config = load_config(cli_overrides=build_cli_overrides(args))

        assert config.addon.provider_dir == tmp_path / "cli-providers"
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_no_flags_no_overrides(self) -> None:
        assert build_cli_overrides(_parse_args([])) == {}
