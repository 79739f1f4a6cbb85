from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Labeled log output for the atlas mapper.

Every line the ``atlas_mapper`` logger writes is ``<LABEL> <message>``, LABEL being
DEBUG|INFO|WARN|ERROR|CRITICAL|SUMMARY. Modules log through
``logging.getLogger(__name__)`` and reach the single stdout handler installed here
by propagation.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "LabeledFormatter",
    "SUMMARY_LEVEL",
    "enable_debug",
    "get_logger",
    "log_summary",
    "reset_logging",
    "setup_logging",
]

APP_LOGGER_NAME = "atlas_mapper"

# sits between INFO (20) and WARNING (30) so it survives the default level
SUMMARY_LEVEL = 25

_LABELS: dict[int, str] = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
    SUMMARY_LEVEL: "SUMMARY",
}

_app_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``<LABEL> <message>``, with the traceback appended when exc_info is set."""

    def format(self, record: logging.LogRecord) -> str:
        label = _LABELS.get(record.levelno, record.levelname)
        text = f"{label} {record.getMessage()}"
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Install the labeled handler on the application logger.

    Calling it again returns the already configured logger unchanged.

    Args:
        level: Threshold for both logger and handler
        stream: Output stream; the current ``sys.stdout`` when omitted

    Returns:
        The ``atlas_mapper`` logger
    """
    global _app_logger
    if _app_logger is not None:
        return _app_logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    app = logging.getLogger(APP_LOGGER_NAME)
    for existing in list(app.handlers):
        app.removeHandler(existing)

    out = logging.StreamHandler(stream if stream is not None else sys.stdout)
    out.setFormatter(LabeledFormatter())
    out.setLevel(level)
    app.addHandler(out)
    app.setLevel(level)
    # records must not reach the root logger a second time
    app.propagate = False

    _app_logger = app
    return app


def enable_debug(logger: logging.Logger | None = None) -> None:
    """Lower the logger and all its handlers to DEBUG."""
    target = logger or get_logger()
    target.setLevel(logging.DEBUG)
    for h in target.handlers:
        h.setLevel(logging.DEBUG)


def get_logger() -> logging.Logger:
    return _app_logger if _app_logger is not None else setup_logging()


def log_summary(message: str) -> None:
    """Emit ``message`` at SUMMARY level ("SUMMARY <message>")."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Drop the configured handler so the next setup_logging() starts fresh (tests)."""
    global _app_logger
    if _app_logger is None:
        return
    for h in list(_app_logger.handlers):
        _app_logger.removeHandler(h)
    _app_logger.setLevel(logging.NOTSET)
    _app_logger = None
