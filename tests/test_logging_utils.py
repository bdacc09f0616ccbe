from __future__ import annotations

import logging

from ruhverse.logging_utils import (
    PACKAGE_LOGGER,
    Utf8AccessFormatter,
    build_uvicorn_log_config,
    set_debug_logging,
)


def test_access_formatter_decodes_paths() -> None:
    formatter = Utf8AccessFormatter(fmt="%(request_line)s %(status_code)s", use_colors=False)
    record = logging.LogRecord(
        "uvicorn.access",
        logging.INFO,
        __file__,
        1,
        '%s - "%s %s HTTP/%s" %d',
        ("127.0.0.1:5000", "GET", "/quran/surah/2?q=%D8%A7%D9%84%D8%A8%D9%82%D8%B1%D8%A9", "1.1", 200),
        None,
    )
    output = formatter.format(record)
    assert "/quran/surah/2?q=البقرة" in output
    assert "200" in output


def test_log_config_registers_package_logger() -> None:
    config = build_uvicorn_log_config(debug=True)
    assert config["formatters"]["access"]["()"] == "ruhverse.logging_utils.Utf8AccessFormatter"
    assert config["loggers"][PACKAGE_LOGGER]["level"] == "DEBUG"
    assert build_uvicorn_log_config()["loggers"][PACKAGE_LOGGER]["level"] == "INFO"


def test_set_debug_logging_toggles_level() -> None:
    logger = logging.getLogger(PACKAGE_LOGGER)
    previous = logger.level
    try:
        set_debug_logging(True)
        assert logger.level == logging.DEBUG
        set_debug_logging(False)
        assert logger.level == logging.INFO
    finally:
        logger.setLevel(previous)
