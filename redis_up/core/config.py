"""Configuration management with environment variable integration and validation."""

import os
from pathlib import Path
from typing import Dict, Any, Optional

import yaml
from pydantic import ValidationError

from .types import RedisUpConfig
from .errors import ConfigurationError

ENV_PREFIX = "REDIS_UP_"


def load_env_overrides(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """Load environment variables with the given prefix and convert to appropriate types."""
    overrides: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix):
            field_name = key[len(prefix) :].lower()

            # Handle nested configuration (e.g., REDIS_UP_IMAGES__REDIS)
            if "__" in field_name:
                parts = field_name.split("__")
                if len(parts) == 2:
                    section, sub_field = parts
                    overrides.setdefault(section, {})[sub_field] = _convert_env_value(value)
                continue

            overrides[field_name] = _convert_env_value(value)

    return overrides


def _convert_env_value(value: str) -> Any:
    """Convert string environment value to appropriate Python type."""
    if not value:
        return None

    # Try to convert to int first (before boolean check)
    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    # Handle boolean values (after numeric conversion)
    if value.lower() in ("true", "yes", "on"):
        return True
    elif value.lower() in ("false", "no", "off"):
        return False

    # Handle lists (comma-separated)
    if "," in value:
        return [item.strip() for item in value.split(",")]

    return value


def _merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Merge updates into base, descending into nested sections."""
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Resolves the tool configuration once per process."""

    def load_config(
        self, config_file: Optional[Path] = None, **overrides: Any
    ) -> RedisUpConfig:
        """Load configuration from file and environment with CLI overrides."""

        # Load configuration in the following order of precedence:
        # 1. CLI overrides (highest priority)
        # 2. Environment variables
        # 3. Config file data
        # 4. Model defaults (lowest priority)

        config_data: Dict[str, Any] = {}

        if config_file is not None:
            config_data = _merge(config_data, self._load_from_file(Path(config_file)))

        config_data = _merge(config_data, load_env_overrides())

        # CLI passes None for options the user did not give
        config_data = _merge(
            config_data, {key: value for key, value in overrides.items() if value is not None}
        )

        try:
            return RedisUpConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _load_from_file(self, config_file: Path) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        if config_file.suffix.lower() not in (".yml", ".yaml"):
            raise ConfigurationError(
                f"Unsupported config file format: {config_file.suffix}"
            )
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_file}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {config_file} must contain a mapping at the top level"
            )
        return data


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> RedisUpConfig:
    """Resolve configuration from all sources."""
    return ConfigManager().load_config(config_file, **overrides)
