"""Tests for logging bootstrap behavior."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
import unittest

import structlog

from cozy_event.bus import EventBus
from cozy_event.logging_utils import NOISY_LOGGERS, configure_logging


class BusLoggingTests(unittest.TestCase):
    """Validate lifecycle log events emitted by the bus."""

    def test_destroy_logs_lifecycle_event(self) -> None:
        bus = EventBus()
        with self.assertLogs("cozy_event.bus", level="DEBUG") as logs:
            bus.destroy()
        self.assertTrue(any("bus.destroyed" in line for line in logs.output))

    def test_registration_after_destroy_is_logged(self) -> None:
        bus = EventBus()
        bus.destroy()
        with self.assertLogs("cozy_event.bus", level="DEBUG") as logs:
            bus.on("e", print)
        self.assertTrue(any("bus.on.ignored" in line for line in logs.output))


class ConfigureLoggingTests(unittest.TestCase):
    """Validate configure_logging() handler setup behavior."""

    def setUp(self) -> None:
        # Preserve root logger state so tests do not pollute each other.
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            if handler not in self._original_handlers:
                handler.close()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)
        structlog.reset_defaults()

    def _stream_handlers(self) -> list[logging.Handler]:
        return [
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]

    def test_configure_logging_adds_stderr_handler(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(len(self._stream_handlers()), 1)

    def test_configure_logging_structured_uses_structlog_formatter(self) -> None:
        configure_logging({"level": "DEBUG", "structured": True, "log_to_file": False})
        formatters = [h.formatter for h in logging.getLogger().handlers]
        self.assertTrue(
            any(isinstance(f, structlog.stdlib.ProcessorFormatter) for f in formatters)
        )

    def test_configure_logging_plain_formatter_when_not_structured(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        formatters = [h.formatter for h in logging.getLogger().handlers]
        self.assertFalse(
            any(isinstance(f, structlog.stdlib.ProcessorFormatter) for f in formatters)
        )

    def test_configure_logging_sets_root_level(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

    def test_configure_logging_noisy_loggers_set_to_warning(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        for name in NOISY_LOGGERS:
            self.assertEqual(logging.getLogger(name).level, logging.WARNING)

    def test_configure_logging_file_handler_created(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = str(Path(tmp) / "nested" / "test.log")
            configure_logging(
                {
                    "level": "DEBUG",
                    "structured": True,
                    "log_to_file": True,
                    "log_file_path": log_path,
                }
            )
            file_handlers = [
                h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
            ]
            self.assertEqual(len(file_handlers), 1)
            self.assertTrue(Path(log_path).exists())
            for handler in file_handlers:
                handler.close()

    def test_configure_logging_stderr_handler_filters_to_cozy_event(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        handler = self._stream_handlers()[0]
        own_record = logging.LogRecord(
            name="cozy_event.bus",
            level=logging.WARNING,
            pathname="",
            lineno=0,
            msg="ok",
            args=(),
            exc_info=None,
        )
        other_record = logging.LogRecord(
            name="asyncio",
            level=logging.WARNING,
            pathname="",
            lineno=0,
            msg="noise",
            args=(),
            exc_info=None,
        )
        # handler.filter() returns truthy when all filters pass.
        self.assertTrue(handler.filter(own_record))
        self.assertFalse(handler.filter(other_record))


if __name__ == "__main__":
    unittest.main()
