"""Tests for the configuration system."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
import yaml

from arena_research.core.config import Config, get_config, reload_config
from arena_research.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ARENA_ACCESS_TOKEN", "LOGGING_LEVEL", "CACHE_TTL_SECONDS", "SEARCH_PER_PAGE"):
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Test the Config class."""

    @pytest.fixture
    def temp_yaml_config(self) -> str:
        """Create a temporary YAML config file."""
        config_data = {
            "logging": {"level": "DEBUG", "file": "arena.log"},
            "cache": {"ttl_seconds": 120},
            "api_keys": {"arena_access_token": "file_token_123"},
        }

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(config_data, f)
            temp_path = f.name

        yield temp_path

        Path(temp_path).unlink(missing_ok=True)

    @pytest.fixture
    def temp_toml_config(self, tmp_path) -> str:
        path = tmp_path / "arena-research.toml"
        path.write_text('[search]\nper_page = 50\n\n[api]\ntimeout_seconds = 10\n')
        return str(path)

    def test_defaults(self) -> None:
        """Test that config initializes with defaults."""
        config = Config()

        assert config.get("api.base_url") == "https://api.are.na/v3"
        assert config.get("api.legacy_base_url") == "https://api.are.na/v2"
        assert config.get("api.rate_limit_delay_ms") == 200
        assert config.get("cache.ttl_seconds") == 900
        assert config.get("cache.quick_ttl_seconds") == 3600
        assert config.get("search.per_page") == 24

    def test_load_yaml_config(self, temp_yaml_config: str) -> None:
        """Test loading configuration from YAML file."""
        config = Config(temp_yaml_config)

        assert config.get("logging.level") == "DEBUG"
        assert config.get("cache.ttl_seconds") == 120
        # Defaults are merged into partially specified sections
        assert config.get("cache.quick_ttl_seconds") == 3600

    def test_load_toml_config(self, temp_toml_config: str) -> None:
        """Test loading configuration from TOML file."""
        config = Config(temp_toml_config)

        assert config.get_int("search.per_page") == 50
        assert config.get("api.timeout_seconds") == 10
        assert config.get("api.base_url") == "https://api.are.na/v3"

    def test_missing_file_uses_defaults(self) -> None:
        config = Config("/nonexistent/arena-research.yaml")
        assert config.get("search.per_page") == 24

    def test_environment_overrides_file(self, temp_yaml_config: str, monkeypatch) -> None:
        """Test that environment variables win over file values."""
        monkeypatch.setenv("CACHE_TTL_SECONDS", "30")
        config = Config(temp_yaml_config)

        assert config.get_int("cache.ttl_seconds") == 30

    def test_get_with_default(self) -> None:
        config = Config()
        assert config.get("nonexistent.key", "DEFAULT") == "DEFAULT"

    def test_get_int_invalid(self) -> None:
        config = Config()
        config.set("search.per_page", "many")
        assert config.get_int("search.per_page", 24) == 24

    def test_get_bool(self, monkeypatch) -> None:
        config = Config()
        assert config.get_bool("cache.enabled") is True
        monkeypatch.setenv("CACHE_ENABLED", "false")
        assert config.get_bool("cache.enabled") is False

    def test_set_and_section(self) -> None:
        config = Config()
        config.set("output.drafts_dir", "/tmp/drafts")
        assert config.get_section("output")["drafts_dir"] == "/tmp/drafts"

        config.set("new.nested.value", "test")
        assert config.get("new.nested.value") == "test"

    def test_access_token_from_file(self, temp_yaml_config: str) -> None:
        assert Config(temp_yaml_config).get_access_token() == "file_token_123"

    def test_access_token_environment_wins(self, temp_yaml_config: str, monkeypatch) -> None:
        monkeypatch.setenv("ARENA_ACCESS_TOKEN", "env_token")
        assert Config(temp_yaml_config).get_access_token() == "env_token"

    def test_access_token_absent(self) -> None:
        assert Config().get_access_token() is None

    def test_reload(self, temp_yaml_config: str) -> None:
        config = Config(temp_yaml_config)
        config.set("logging.level", "ERROR")
        config.reload()
        assert config.get("logging.level") == "DEBUG"


class TestValidation:
    """Test configuration validation."""

    def test_defaults_are_valid(self) -> None:
        result = Config().validate()
        assert result.is_valid
        # Missing token is a warning, not an error
        assert any("ARENA_ACCESS_TOKEN" in w for w in result.warnings)

    def test_invalid_values(self) -> None:
        config = Config()
        config.set("logging.level", "LOUD")
        config.set("api.base_url", "ftp://api.are.na")
        config.set("search.per_page", 500)
        config.set("cache.ttl_seconds", -1)

        result = config.validate()
        assert not result.is_valid
        assert len(result.errors) == 4
        assert "Errors:" in str(result)

    def test_low_delay_warns(self) -> None:
        config = Config()
        config.set("api.rate_limit_delay_ms", 50)
        result = config.validate()
        assert result.is_valid
        assert any("rate_limit_delay_ms" in w for w in result.warnings)

    def test_validate_and_raise(self) -> None:
        config = Config()
        config.set("api.timeout_seconds", 0)
        with pytest.raises(ConfigurationError):
            config.validate_and_raise()


class TestGlobalConfig:
    def test_get_config_is_singleton(self) -> None:
        assert get_config() is get_config()

    def test_reload_config(self) -> None:
        config = get_config()
        config.set("search.per_page", 77)
        reload_config()
        assert get_config().get("search.per_page") == 24
