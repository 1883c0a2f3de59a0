"""Tests for logging setup, structured output and context."""

import json
import logging
import sys

from redis_up.core.log import (
    add_file_logging,
    clear_log_context,
    configure_logging,
    get_log_context,
    get_logger,
    log_container_event,
    log_context,
    log_instance_event,
    reset_logging,
    set_log_context,
)
from redis_up.core.log_formatters import RedisUpRichHandler, StructuredFormatter
from redis_up.core.logger_factory import IsolatedLogManager


def _read_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestIsolatedLogManager:
    """Test handler wiring of an isolated manager."""

    def setup_method(self):
        self.manager = IsolatedLogManager(namespace="redis_up_test")

    def teardown_method(self):
        self.manager.shutdown()

    def test_loggers_do_not_propagate(self):
        logger = self.manager.create_logger("component")

        assert logger.name == "redis_up_test.component"
        assert logger.propagate is False
        assert self.manager.create_logger("component") is logger

    def test_configure_attaches_to_existing_loggers(self, temp_dir):
        logger = self.manager.create_logger("early")

        self.manager.configure(level=logging.WARNING, log_file=temp_dir / "log.jsonl")

        assert any(isinstance(h, RedisUpRichHandler) for h in logger.handlers)
        assert self.manager.configured

    def test_file_receives_structured_events(self, temp_dir):
        log_file = temp_dir / "log.jsonl"
        self.manager.configure(log_file=log_file, enable_console=False)
        logger = self.manager.create_logger("orchestrator")

        with log_context(instance="redis-basic-1", kind="basic"):
            log_container_event(logger, "started", "redis-basic-1", image="redis:7-alpine")
        log_instance_event(logger, "stopped", "redis-basic-1", "basic", errors=0)
        self.manager.shutdown()

        first, second = _read_lines(log_file)
        assert first["message"] == "Container redis-basic-1 started"
        assert first["fields"]["event_type"] == "container"
        assert first["fields"]["image"] == "redis:7-alpine"
        assert first["context"] == {"instance": "redis-basic-1", "kind": "basic"}
        assert second["fields"]["instance_event"] == "stopped"
        assert "context" not in second

    def test_reconfigure_replaces_handlers(self, temp_dir):
        logger = self.manager.create_logger("component")

        self.manager.configure(enable_console=True)
        self.manager.configure(enable_console=True)

        assert len([h for h in logger.handlers if isinstance(h, RedisUpRichHandler)]) == 1


class TestLogContext:
    """Test thread-local context helpers."""

    def teardown_method(self):
        clear_log_context()

    def test_context_manager_restores_previous(self):
        set_log_context(command="deploy")

        with log_context(instance="a"):
            assert get_log_context() == {"command": "deploy", "instance": "a"}

        assert get_log_context() == {"command": "deploy"}


class TestStructuredFormatter:
    def test_exception_details(self):
        formatter = StructuredFormatter(include_context=False)
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "x", logging.ERROR, __file__, 1, "failed %s", ("op",), sys.exc_info()
            )

        entry = json.loads(formatter.format(record))

        assert entry["message"] == "failed op"
        assert entry["exception"]["type"] == "ValueError"


class TestGlobalLogging:
    """Test the process-wide logging helpers."""

    def teardown_method(self):
        reset_logging()

    def test_add_file_logging(self, temp_dir):
        log_file = temp_dir / "nested" / "redis-up.jsonl"
        configure_logging(level="WARNING", enable_console=False)
        add_file_logging(log_file)

        get_logger("redis_up.test_global").debug("registry saved")
        reset_logging()

        (entry,) = _read_lines(log_file)
        assert entry["level"] == "DEBUG"
        assert entry["message"] == "registry saved"
