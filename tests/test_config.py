"""Tests for JSON config loading and logging setup."""

from __future__ import annotations

import logging
import tempfile
import unittest
from pathlib import Path

from kiloview import config
from kiloview.log import configure_logging


class ConfigTests(unittest.TestCase):
    def test_missing_or_malformed_config_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            self.assertEqual(config.load_config(path), {})

            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(config.load_config(path), {})

            path.write_text("[1, 2]", encoding="utf-8")
            self.assertEqual(config.load_config(path), {})

    def test_log_settings_are_read(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text('{"log_file": "/tmp/kv.log", "log_level": "debug"}', encoding="utf-8")
            data = config.load_config(path)

        self.assertEqual(config.load_log_file(data), Path("/tmp/kv.log"))
        self.assertEqual(config.load_log_level(data), "DEBUG")

    def test_log_defaults(self) -> None:
        self.assertIsNone(config.load_log_file({}))
        self.assertIsNone(config.load_log_file({"log_file": 3}))
        self.assertEqual(config.load_log_file({"log_file": "default"}), config.DEFAULT_LOG_DIR / "kiloview.log")
        self.assertEqual(config.load_log_level({}), "WARNING")


class ConfigureLoggingTests(unittest.TestCase):
    def tearDown(self) -> None:
        configure_logging(None)

    def test_without_log_file_nothing_reaches_stderr(self) -> None:
        logger = configure_logging(None)

        self.assertFalse(logger.propagate)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0], logging.NullHandler)

    def test_file_handler_writes_records(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_file = Path(tmp) / "logs" / "kiloview.log"
            logger = configure_logging(log_file, "debug")
            logging.getLogger("kiloview.loop").debug("hello from the loop")
            for handler in logger.handlers:
                handler.flush()
            text = log_file.read_text(encoding="utf-8")
            configure_logging(None)

        self.assertEqual(logger.level, logging.DEBUG)
        self.assertIn("DEBUG kiloview.loop: hello from the loop", text)

    def test_unknown_level_falls_back_to_warning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            logger = configure_logging(Path(tmp) / "kv.log", "chatty")
            configure_logging(None)

        self.assertEqual(logger.level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
