"""Configuration management system for arena-research.

This module provides centralized configuration loading from multiple sources:
- YAML/TOML configuration files
- Environment variables (.env)
- Default values

Includes validation to ensure configuration values are correct.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

import yaml
from dotenv import load_dotenv

from arena_research.core.errors import ConfigurationError

TOKEN_ENV_VAR = "ARENA_ACCESS_TOKEN"


@dataclass
class ValidationResult:
    """Result of configuration validation."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def __str__(self) -> str:
        """Format validation result as string."""
        lines = []
        if self.errors:
            lines.append("Errors:")
            lines.extend(f"  - {e}" for e in self.errors)
        if self.warnings:
            lines.append("Warnings:")
            lines.extend(f"  - {w}" for w in self.warnings)
        if not lines:
            return "Configuration is valid."
        return "\n".join(lines)


class Config:
    """Configuration manager for arena-research."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML or TOML config file (optional)
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._config: Dict[str, Any] = {}
        self._config_file = config_file

        # Load .env file if it exists
        env_path = Path(".env")
        if env_path.exists():
            load_dotenv(env_path)
            self.logger.debug("Loaded environment variables from .env")

        if config_file:
            self._load_config_file(config_file)
        else:
            self._auto_load_config()

        self._load_defaults()

    def _load_config_file(self, config_file: str) -> None:
        """Load configuration from YAML or TOML file."""
        config_path = Path(config_file)

        if not config_path.exists():
            self.logger.warning(f"Config file not found: {config_file}")
            return

        try:
            with open(config_path, "rb") as f:
                if config_file.endswith((".yaml", ".yml")):
                    self._config = yaml.safe_load(f) or {}
                    self.logger.debug(f"Loaded YAML config from {config_file}")
                elif config_file.endswith(".toml"):
                    self._config = tomllib.load(f)
                    self.logger.debug(f"Loaded TOML config from {config_file}")
                else:
                    self.logger.error(f"Unsupported config format: {config_file}")
        except (OSError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
            self.logger.error(f"Failed to load config file {config_file}: {e}")

    def _auto_load_config(self) -> None:
        """Automatically find and load config file."""
        config_dir = Path("config")

        candidates = [
            config_dir / "arena-research.yaml",
            config_dir / "arena-research.yml",
            config_dir / "arena-research.toml",
            Path("arena-research.yaml"),
            Path("arena-research.yml"),
            Path("arena-research.toml"),
        ]

        for candidate in candidates:
            if candidate.exists():
                self._load_config_file(str(candidate))
                return

        self.logger.debug("No config file found, using defaults and environment variables")

    def _load_defaults(self) -> None:
        """Load default configuration values."""
        defaults = {
            "api": {
                "base_url": "https://api.are.na/v3",
                "legacy_base_url": "https://api.are.na/v2",
                "timeout_seconds": 30,
                "rate_limit_delay_ms": 200,
            },
            "cache": {
                "enabled": True,
                "directory": "data/cache",
                "ttl_seconds": 900,
                "quick_ttl_seconds": 3600,
            },
            "search": {"per_page": 24},
            "logging": {
                "level": "WARNING",
                "file": "",
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            },
            "output": {"drafts_dir": "~/clawd/drafts"},
            "api_keys": {"arena_access_token": ""},
        }

        # Merge defaults with loaded config (loaded config takes precedence)
        for key, value in defaults.items():
            if key not in self._config:
                self._config[key] = value
            elif isinstance(value, dict):
                self._config[key] = {**value, **(self._config.get(key) or {})}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Supports dot notation for nested keys: "cache.ttl_seconds".
        An environment variable named after the key ("CACHE_TTL_SECONDS")
        takes precedence over the file.

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_key = key.upper().replace(".", "_")
        env_value = os.getenv(env_key)
        if env_value is not None:
            return env_value

        keys = key.split(".")
        value: Any = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_int(self, key: str, default: int = 0) -> int:
        """Get a value coerced to int (environment overrides arrive as strings)."""
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            self.logger.warning(f"Config {key}={value!r} is not an integer, using {default}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get a value coerced to bool."""
        value = self.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value at runtime.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self.logger.debug(f"Set config {key} = {value}")

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "api", "cache")

        Returns:
            Dictionary with section configuration
        """
        return self._config.get(section, {})

    def get_access_token(self) -> Optional[str]:
        """
        Get the Are.na personal access token.

        ARENA_ACCESS_TOKEN wins over ``api_keys.arena_access_token``.  An
        absent token means anonymous access, not an error.

        Returns:
            Token or None if not configured
        """
        token = os.getenv(TOKEN_ENV_VAR) or self.get("api_keys.arena_access_token", "")
        return token or None

    def to_dict(self) -> Dict[str, Any]:
        """Get all configuration as dictionary."""
        return self._config.copy()

    def reload(self, config_file: Optional[str] = None) -> None:
        """
        Reload configuration from file.

        Args:
            config_file: Path to config file (optional, uses original if not provided)
        """
        self._config = {}
        config_file = config_file or self._config_file
        if config_file:
            self._load_config_file(config_file)
        else:
            self._auto_load_config()
        self._load_defaults()
        self.logger.info("Configuration reloaded")

    def validate(self) -> ValidationResult:
        """
        Validate the configuration.

        Returns:
            ValidationResult with errors and warnings
        """
        result = ValidationResult(is_valid=True)

        log_level = str(self.get("logging.level", "WARNING"))
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            result.add_error(
                f"Invalid logging level '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )

        for key in ("api.base_url", "api.legacy_base_url"):
            url = str(self.get(key, ""))
            if not url.startswith(("http://", "https://")):
                result.add_error(f"{key} must be an http(s) URL")

        timeout = self.get("api.timeout_seconds", 30)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            result.add_error("api.timeout_seconds must be a positive number")

        delay = self.get("api.rate_limit_delay_ms", 200)
        if not isinstance(delay, int) or delay < 0:
            result.add_error("api.rate_limit_delay_ms must be a non-negative integer")
        elif delay < 100:
            result.add_warning(f"api.rate_limit_delay_ms={delay} is low, may trigger rate limiting")

        for key in ("cache.ttl_seconds", "cache.quick_ttl_seconds"):
            ttl = self.get(key, 0)
            if not isinstance(ttl, int) or ttl < 0:
                result.add_error(f"{key} must be a non-negative integer")

        per_page = self.get("search.per_page", 24)
        if not isinstance(per_page, int) or not 1 <= per_page <= 100:
            result.add_error("search.per_page must be an integer between 1 and 100")

        if not self.get_access_token():
            result.add_warning(
                f"{TOKEN_ENV_VAR} is not set; search and 'me' will fail, lookups run anonymously"
            )

        if not result.is_valid:
            for error in result.errors:
                self.logger.error(f"Config validation error: {error}")
        for warning in result.warnings:
            self.logger.debug(f"Config validation warning: {warning}")

        return result

    def validate_and_raise(self) -> None:
        """
        Validate configuration and raise exception if invalid.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        result = self.validate()
        if not result.is_valid:
            raise ConfigurationError(f"Invalid configuration:\n{result}")


# Global configuration instance
_global_config: Optional[Config] = None


def get_config(config_file: Optional[str] = None) -> Config:
    """
    Get global configuration instance.

    Args:
        config_file: Path to config file (only used on first call)

    Returns:
        Config instance
    """
    global _global_config

    if _global_config is None:
        _global_config = Config(config_file)

    return _global_config


def reload_config(config_file: Optional[str] = None) -> None:
    """
    Reload global configuration.

    Args:
        config_file: Path to config file (optional)
    """
    global _global_config

    if _global_config is not None:
        _global_config.reload(config_file)
    else:
        _global_config = Config(config_file)
