"""Tests for logging utilities."""

import logging
from logging.handlers import RotatingFileHandler

import colorama
import pytest

import mediashelf.utils.logging as logging_module
from mediashelf.utils.logging import (
    CleanFormatter,
    ColorFormatter,
    Logger,
    strip_markers,
)


def _record(msg) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


def test_strip_markers_keeps_content():
    """Markers are removed while quoted and braced values survive."""
    assert (
        strip_markers("Created $$'Dune'$$ $${id: 3}$$") == "Created 'Dune' {id: 3}"
    )


def test_color_formatter_applies_color_codes():
    """Test that ColorFormatter applies color codes to marked sections."""
    formatter = ColorFormatter("%(levelname)s:%(message)s")
    original_message = "$$'value'$$ $${key: value}$$ message"
    record = _record(original_message)

    formatted = formatter.format(record)

    assert colorama.Fore.GREEN in formatted
    assert colorama.Fore.LIGHTBLUE_EX in formatted
    assert colorama.Style.DIM in formatted
    assert record.msg == original_message
    assert record.levelname == "INFO"


def test_clean_formatter_removes_markers():
    """Test that CleanFormatter removes special markers from the message."""
    formatter = CleanFormatter("%(message)s")
    original_message = "wrapped $$'value'$$ and $${key: 1}$$"
    record = _record(original_message)

    formatted = formatter.format(record)

    assert formatted == "wrapped 'value' and {key: 1}"
    assert record.msg == original_message


def test_clean_formatter_handles_non_string_messages():
    """CleanFormatter should delegate to base formatter for non-str messages."""
    assert CleanFormatter("%(message)s").format(_record({"value": 1})) == (
        "{'value': 1}"
    )


def test_logger_prefixes_class_name():
    """Test that Logger prefixes messages with the class name."""
    logger = Logger("test")
    logger.setLevel(logging.DEBUG)
    handler = _Capture()
    logger.addHandler(handler)

    class Importer:
        def __init__(self, bound_logger: Logger):
            self.log = bound_logger

        def run(self):
            self.log.info("hello")
            self.log.success("done")

    Importer(logger).run()

    assert [r.getMessage() for r in handler.records] == [
        "Importer: hello",
        "Importer: done",
    ]


def test_logger_does_not_prefix_module_level_calls():
    """Plain function calls are logged unchanged."""
    logger = Logger("test")
    logger.setLevel(logging.INFO)
    handler = _Capture()
    logger.addHandler(handler)

    def run():
        logger.info("plain")

    run()

    assert handler.records[0].getMessage() == "plain"


def test_logger_success_level_records_message():
    """Test that Logger logs messages at SUCCESS level."""
    logger = Logger("test")
    logger.setLevel(Logger.SUCCESS)
    handler = _Capture()
    logger.addHandler(handler)

    logger.info("hidden")
    logger.success("operation complete")

    assert len(handler.records) == 1
    record = handler.records[0]
    assert record.levelno == Logger.SUCCESS
    assert record.levelname == "SUCCESS"
    assert record.getMessage() == "operation complete"


def test_logger_setup_creates_file_and_console_handlers(
    tmp_path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Setup should honor SUCCESS level and configure both handlers."""
    logger = Logger("setup-test")
    monkeypatch.setattr(logging_module, "supports_color", lambda: True)
    monkeypatch.setattr(logging_module.sys, "platform", "linux")

    logger.setup("SUCCESS", log_dir=tmp_path / "logs")

    assert logger.level == Logger.SUCCESS
    assert (tmp_path / "logs" / "setup-test.SUCCESS.log").exists()
    handlers = logger.handlers[:]
    assert any(isinstance(h, RotatingFileHandler) for h in handlers)
    console = [h for h in handlers if not isinstance(h, RotatingFileHandler)]
    assert isinstance(console[0].formatter, ColorFormatter)

    for handler in handlers:
        handler.close()
        logger.removeHandler(handler)


def test_logger_setup_without_color_replaces_handlers(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Setup replaces existing handlers and falls back to plain output."""
    logger = Logger("color-test")
    logger.addHandler(logging.NullHandler())
    monkeypatch.setattr(logging_module, "supports_color", lambda: False)

    logger.setup("INFO")

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, CleanFormatter)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)


def test_supports_color_honors_no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    """NO_COLOR disables colored output even on a terminal."""
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setattr(logging_module.sys.stdout, "isatty", lambda: True)
    logging_module.supports_color.cache_clear()
    try:
        assert logging_module.supports_color() is False
    finally:
        logging_module.supports_color.cache_clear()
