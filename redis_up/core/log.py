"""Structured logging with JSON file output and rich terminal formatting."""

import logging
from typing import Any, Dict, Optional, Union, Protocol
from pathlib import Path

from .log_formatters import _log_context
from .logger_factory import IsolatedLogManager


class Logger(Protocol):
    """Protocol for logger instances to enable dependency injection."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log debug message."""

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log info message."""

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log warning message."""

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log error message."""

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log exception with traceback."""


class LogManager:
    """Central logging configuration and management.

    A thin facade over a single process-wide IsolatedLogManager.
    """

    def __init__(self) -> None:
        self._manager = IsolatedLogManager()

    def configure(
        self,
        level: Union[int, str] = logging.WARNING,
        log_file: Optional[Path] = None,
        enable_console: bool = True,
    ) -> None:
        """Configure console (and optionally JSON file) logging."""
        self._manager.configure(
            level=level, log_file=log_file, enable_console=enable_console
        )

    def add_file_logging(self, log_file: Path, level: Union[int, str] = logging.DEBUG) -> None:
        self._manager.attach_file(log_file, level)

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger instance."""
        return self._manager.create_logger(name)

    def shutdown(self) -> None:
        """Shutdown logging system."""
        self._manager.shutdown()

    def reset_configuration(self) -> None:
        """Reset configuration to allow reconfiguration.

        This is useful for test isolation where different tests
        might need different logging configurations.
        """
        self._manager.shutdown()


# Global log manager instance
_log_manager = LogManager()


def configure_logging(**kwargs: Any) -> None:
    """Configure the global logging system."""
    _log_manager.configure(**kwargs)


def add_file_logging(log_file: Path, level: Union[int, str] = logging.DEBUG) -> None:
    """Add JSON-lines file logging to the already-configured logging system.

    Args:
        log_file: Path to the log file
        level: Logging level for the file handler (default: DEBUG for detailed logs)
    """
    _log_manager.add_file_logging(Path(log_file), level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return _log_manager.get_logger(name)


def shutdown_logging() -> None:
    """Shutdown the logging system."""
    _log_manager.shutdown()


def reset_logging() -> None:
    """Reset logging configuration to allow reconfiguration."""
    _log_manager.reset_configuration()


def log_event(
    logger: Logger, event_type: str, message: str, **kwargs: Any
) -> None:
    """Log a structured event with context."""
    logger.info(message, extra={"event_type": event_type, **kwargs})


def log_container_event(
    logger: Logger, event: str, container: str, **kwargs: Any
) -> None:
    """Log a container-related event."""
    extra: Dict[str, Any] = {
        "event_type": "container",
        "container_event": event,
        "container": container,
    }
    extra.update(kwargs)
    logger.info("Container %s %s", container, event, extra=extra)


def log_instance_event(
    logger: Logger, event: str, instance: str, kind: Optional[str] = None, **kwargs: Any
) -> None:
    """Log an instance-related event."""
    extra: Dict[str, Any] = {
        "event_type": "instance",
        "instance_event": event,
        "instance": instance,
    }
    if kind is not None:
        extra["kind"] = kind
    extra.update(kwargs)
    logger.info("Instance %s %s", instance, event, extra=extra)


# Context management shortcuts
def set_log_context(**kwargs: Any) -> None:
    """Set logging context for current thread."""
    _log_context.set_context(**kwargs)


def get_log_context() -> Dict[str, Any]:
    """Get current logging context."""
    return _log_context.get_context()


def clear_log_context() -> None:
    """Clear current logging context."""
    _log_context.clear_context()


def log_context(**kwargs: Any) -> Any:
    """Context manager for temporary logging context."""
    return _log_context.context(**kwargs)
