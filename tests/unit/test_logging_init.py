from __future__ import annotations

import logging
from io import StringIO

from atlas_mapper.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    enable_debug,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == APP_LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert len(second.handlers) == 1
    assert get_logger() is first


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("test_atlas_mapper_labels")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    try:
        logger.info("info message")
        logger.warning("warn message")
        logger.error("error message")
        logger.log(SUMMARY_LEVEL, "rows=1")
    finally:
        logger.removeHandler(handler)

    assert captured.getvalue().splitlines() == [
        "INFO info message",
        "WARN warn message",
        "ERROR error message",
        "SUMMARY rows=1",
    ]


def test_module_loggers_propagate_to_app_logger(capsys):
    setup_logging()
    logging.getLogger("atlas_mapper.services.materializer").warning("child record")
    log_summary("rows=0")
    out = capsys.readouterr().out
    assert "WARN child record" in out
    assert "SUMMARY rows=0" in out


def test_setup_logging_to_custom_stream_and_debug():
    captured = StringIO()
    logger = setup_logging(stream=captured)
    logger.debug("hidden")
    enable_debug(logger)
    logger.debug("shown")
    assert captured.getvalue() == "DEBUG shown\n"
    assert all(h.level == logging.DEBUG for h in logger.handlers)


def test_exception_traceback_is_appended():
    captured = StringIO()
    logger = setup_logging(stream=captured)
    try:
        raise ValueError("bad token")
    except ValueError:
        logger.exception("parse failed")
    lines = captured.getvalue().splitlines()
    assert lines[0] == "ERROR parse failed"
    assert "ValueError: bad token" in lines[-1]
