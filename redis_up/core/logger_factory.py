"""Logger factory for creating isolated logging environments."""

import logging
import threading
from typing import Dict, Optional, Union
from pathlib import Path

from .log_formatters import StructuredFormatter, RedisUpRichHandler


class IsolatedLogManager:
    """Non-singleton log manager owning its handlers and loggers."""

    def __init__(self, namespace: str = "") -> None:
        """Initialize isolated log manager.

        Args:
            namespace: Namespace prefix for logger names to ensure isolation
        """
        self._namespace = namespace
        self._configured = False
        self._log_file: Optional[Path] = None
        self._json_handler: Optional[logging.Handler] = None
        self._console_handler: Optional[logging.Handler] = None
        self._loggers: Dict[str, logging.Logger] = {}
        self._lock = threading.RLock()

    @property
    def configured(self) -> bool:
        return self._configured

    def configure(self,
                  level: Union[int, str] = logging.WARNING,
                  log_file: Optional[Path] = None,
                  enable_console: bool = True,
                  file_level: Union[int, str] = logging.DEBUG) -> None:
        """Configure this logging instance.

        Handlers are attached to loggers that already exist as well as to
        loggers created later, since modules obtain their loggers at import.
        """
        with self._lock:
            if self._configured:
                self._clear_configuration()

            if log_file:
                self.attach_file(log_file, file_level)

            if enable_console:
                self._console_handler = RedisUpRichHandler(
                    show_time=True,
                    show_path=False,
                    markup=False,
                )
                self._console_handler.setLevel(level)
                for logger in self._loggers.values():
                    logger.addHandler(self._console_handler)

            self._configured = True

    def attach_file(self, log_file: Path, level: Union[int, str] = logging.DEBUG) -> None:
        """Add (or replace) the JSON-lines file handler."""
        with self._lock:
            if self._json_handler:
                self._detach(self._json_handler)

            self._log_file = Path(log_file)
            self._log_file.parent.mkdir(parents=True, exist_ok=True)

            self._json_handler = logging.FileHandler(self._log_file, encoding="utf-8")
            self._json_handler.setFormatter(StructuredFormatter(include_context=True))
            self._json_handler.setLevel(level)
            for logger in self._loggers.values():
                logger.addHandler(self._json_handler)

    def create_logger(self, name: str) -> logging.Logger:
        """Create a logger instance with namespace isolation."""
        with self._lock:
            full_name = f"{self._namespace}.{name}" if self._namespace else name

            if full_name in self._loggers:
                return self._loggers[full_name]

            logger = logging.getLogger(full_name)

            # Ensure logger doesn't propagate to root to avoid global interference
            logger.propagate = False
            logger.setLevel(logging.DEBUG)

            if self._json_handler:
                logger.addHandler(self._json_handler)
            if self._console_handler:
                logger.addHandler(self._console_handler)

            self._loggers[full_name] = logger
            return logger

    def shutdown(self) -> None:
        """Shutdown this logging instance."""
        with self._lock:
            self._clear_configuration()

    def _detach(self, handler: logging.Handler) -> None:
        for logger in self._loggers.values():
            logger.removeHandler(handler)
        try:
            handler.close()
        except (OSError, RuntimeError):
            pass  # Ignore handler close errors

    def _clear_configuration(self) -> None:
        """Clear current configuration and handlers."""
        if self._json_handler:
            self._detach(self._json_handler)
            self._json_handler = None

        if self._console_handler:
            self._detach(self._console_handler)
            self._console_handler = None

        self._configured = False
