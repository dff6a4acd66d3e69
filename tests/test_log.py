"""
Tests for xmix logging helpers.
"""

import logging
import sys

from xmix.log import XmixFormatter, get_logger, set_level


class TestLogging:
    """get_logger()/set_level() and the line format."""

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("XMIX_LOG_LEVEL", "DEBUG")
        logger = get_logger("xmix.test_env_level")
        assert logger.level == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("XMIX_LOG_LEVEL", "DEBUG")
        logger = get_logger("xmix.test_explicit_level", level="WARNING")
        assert logger.level == logging.WARNING

    def test_package_logger_owns_handler(self):
        """Module loggers propagate to one handler on the package logger."""
        first = get_logger("xmix.test_single_handler")
        second = get_logger("xmix.test_single_handler")
        assert first is second
        assert second.handlers == []
        assert len(logging.getLogger("xmix").handlers) == 1

    def test_foreign_logger_gets_own_handler(self):
        logger = get_logger("xmix_test_outside")
        assert len(logger.handlers) == 1

    def test_set_level_applies_to_xmix_loggers(self):
        logger = get_logger("xmix.test_set_level", level="INFO")
        set_level("ERROR")
        assert logger.level == logging.ERROR
        set_level("INFO")

    def test_format(self):
        record = logging.LogRecord("xmix.correlator", logging.WARNING, __file__, 1,
                                   "No reply from /lr/mix/fader", None, None)
        line = XmixFormatter().format(record)
        assert line.startswith("[W ")
        assert " correlator] " in line
        assert line.endswith("] No reply from /lr/mix/fader")

    def test_component_width(self):
        record = logging.LogRecord("xmix.simulator.mixer_emulator", logging.INFO, __file__, 1,
                                   "Listening", None, None)
        line = XmixFormatter(width=5).format(record)
        assert " mixer] Listening" in line

    def test_traceback_appended(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("xmix.client", logging.ERROR, __file__, 1,
                                       "Failed", None, sys.exc_info())
        lines = XmixFormatter().format(record).splitlines()
        assert lines[0].endswith("] Failed")
        assert "RuntimeError: boom" in lines[-1]
