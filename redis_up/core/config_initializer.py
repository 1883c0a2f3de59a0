"""Configuration initialization with side effects separated from validation.

Usage:
    # Step 1: Create and validate config (no side effects)
    config = load_config(config_file)

    # Step 2: Initialize config (side effects: create dirs)
    config = initialize_config(config)

    # Step 3: Use initialized config
    app_context = ApplicationContext.create(config)
"""

from .types import RedisUpConfig
from .errors import PathError
from .log import get_logger

logger = get_logger(__name__)


def initialize_config(config: RedisUpConfig) -> RedisUpConfig:
    """Initialize configuration with side effects.

    Side Effects:
        - Expands ``~`` in config_dir
        - Creates config_dir on the filesystem

    Raises:
        PathError: If the config directory cannot be created
    """
    config.config_dir = config.config_dir.expanduser()
    try:
        config.config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PathError(
            f"Failed to create config directory {config.config_dir}: {e}"
        ) from e
    logger.debug("Using config directory: %s", config.config_dir)
    return config
