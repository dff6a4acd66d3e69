"""
Logging for xmix.

Module loggers hand their records up to the "xmix" package logger, which
owns the single stderr handler. stdout is left to the CLI's JSON output.
"""
import logging
import os
import sys
import threading
from typing import Optional

PACKAGE = "xmix"
LEVEL_ENV = "XMIX_LOG_LEVEL"

_setup_lock = threading.Lock()


class XmixFormatter(logging.Formatter):
    """One line per record, tracebacks appended below it.

    Example: [W 14:23:45.123 correlator] No reply from /lr/mix/fader
    """

    def __init__(self, width: int = 10):
        super().__init__()
        self.width = width

    def format(self, record):
        component = record.name.rsplit('.', 1)[-1][:self.width].ljust(self.width)
        stamp = f"{self.formatTime(record, '%H:%M:%S')}.{record.msecs:03.0f}"
        line = f"[{record.levelname[0]} {stamp} {component}] {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def resolve_level(level: Optional[str] = None) -> int:
    """Level name -> logging constant; XMIX_LOG_LEVEL, then INFO, when unset."""
    if level is None:
        level = os.getenv(LEVEL_ENV, "INFO")
    return getattr(logging, level.upper(), logging.INFO)


def _attach_handler(logger: logging.Logger) -> None:
    with _setup_lock:
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(XmixFormatter())
            logger.addHandler(handler)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Logger for an xmix module (usually get_logger(__name__)).

    Loggers outside the xmix namespace, e.g. "__main__", get a handler of
    their own.
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))
    if name == PACKAGE or name.startswith(PACKAGE + "."):
        _attach_handler(logging.getLogger(PACKAGE))
    else:
        _attach_handler(logger)
    return logger


def set_level(level: str) -> None:
    """Apply a level to every xmix logger created so far."""
    resolved = resolve_level(level)
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith(PACKAGE) and isinstance(logger, logging.Logger):
            logger.setLevel(resolved)
