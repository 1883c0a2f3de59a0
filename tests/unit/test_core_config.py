"""Tests for configuration loading and precedence."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from redis_up.core.config import ConfigManager, load_config, load_env_overrides
from redis_up.core.config_initializer import initialize_config
from redis_up.core.errors import ConfigurationError


class TestEnvironmentOverrides:
    """Test REDIS_UP_* environment parsing."""

    def test_flat_and_nested_values(self):
        """Test flat and double-underscore nested variables."""
        env = {
            "REDIS_UP_HOST": "127.0.0.1",
            "REDIS_UP_IMAGES__REDIS": "redis:6",
            "REDIS_UP_TIMEOUTS__NODE_READY": "5",
            "UNRELATED": "x",
        }
        with patch.dict(os.environ, env, clear=True):
            overrides = load_env_overrides()

        assert overrides == {
            "host": "127.0.0.1",
            "images": {"redis": "redis:6"},
            "timeouts": {"node_ready": 5},
        }


class TestConfigManager:
    """Test configuration precedence."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

        assert config.name_prefix == "redis"
        assert config.images.redis == "redis:7-alpine"

    def test_file_then_env_then_cli(self, temp_dir):
        """Test CLI overrides beat env, which beats the file."""
        config_file = temp_dir / "redis-up.yaml"
        config_file.write_text(
            "name_prefix: fromfile\nhost: filehost\nimages:\n  redis: redis:file\n"
        )
        env = {"REDIS_UP_HOST": "envhost", "REDIS_UP_LOG_LEVEL": "INFO"}
        with patch.dict(os.environ, env, clear=True):
            config = ConfigManager().load_config(config_file, log_level="DEBUG", host=None)

        assert config.name_prefix == "fromfile"
        assert config.host == "envhost"
        assert config.log_level == "DEBUG"
        assert config.images.redis == "redis:file"
        assert config.images.stack == "redis/redis-stack-server:latest"

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(temp_dir / "missing.yaml")

    def test_unsupported_suffix(self, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text("x = 1")

        with pytest.raises(ConfigurationError, match="Unsupported"):
            load_config(config_file)

    def test_non_mapping_file(self, temp_dir):
        config_file = temp_dir / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_file)

    def test_invalid_values(self):
        with patch.dict(os.environ, {"REDIS_UP_INSIGHT_INTERNAL_PORT": "abc"}, clear=True):
            with pytest.raises(ConfigurationError, match="Invalid configuration"):
                load_config()


class TestInitializeConfig:
    """Test side effects of configuration initialization."""

    def test_creates_config_dir(self, temp_dir):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(config_dir=str(temp_dir / "nested" / "dir"))

        initialize_config(config)

        assert config.config_dir.is_dir()
        assert isinstance(config.config_dir, Path)
