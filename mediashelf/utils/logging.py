"""Logging utilities module.

Messages may wrap values in highlight markers: ``$$'value'$$`` for quoted
values and ``$${key: value}$$`` for structured details. The console formatter
renders them in color, the file formatter strips them.
"""

import logging
import os
import re
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import ClassVar

import colorama
from colorama import Fore, Style

__all__ = ["CleanFormatter", "ColorFormatter", "Logger", "get_logger"]

QUOTED_PATTERN = re.compile(r"\$\$'((?:[^']|'(?!\$\$))*)'\$\$")
BRACED_PATTERN = re.compile(r"\$\$\{(.*?)\}\$\$")

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def strip_markers(message: str) -> str:
    """Remove highlight markers from a message, keeping their content."""
    message = QUOTED_PATTERN.sub("'\\1'", message)
    return BRACED_PATTERN.sub("{\\1}", message)


@lru_cache(maxsize=1)
def supports_color() -> bool:
    """Check whether stdout is an ANSI capable terminal."""
    if not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()):
        return False
    if os.environ.get("NO_COLOR"):
        return False
    if sys.platform == "win32":
        return (
            getattr(colorama, "fixed_windows_console", False)
            or "ANSICON" in os.environ
            or "WT_SESSION" in os.environ
        )
    return True


class ColorFormatter(logging.Formatter):
    """Formatter that renders level names and highlight markers in color.

    Color Scheme:
        DEBUG: Cyan
        INFO: Green
        SUCCESS: Bright Green
        WARNING: Yellow
        ERROR: Red
        CRITICAL: Bright Red
        Quoted values: Light Blue (e.g., $$'Dune'$$)
        Braced values: Dimmed (e.g., $${created: 3}$$)
    """

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "SUCCESS": Fore.GREEN + Style.BRIGHT,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Formats a log record with ANSI color codes.

        Args:
            record (logging.LogRecord): Log record to format

        Returns:
            str: Color-formatted log message
        """
        orig_msg = record.msg
        orig_levelname = record.levelname
        record.levelname = (
            f"{self.COLORS.get(record.levelname, '')}{record.levelname}"
            f"{Style.RESET_ALL}"
        )
        if isinstance(record.msg, str):
            record.msg = QUOTED_PATTERN.sub(
                f"{Fore.LIGHTBLUE_EX}'\\1'{Style.RESET_ALL}", record.msg
            )
            record.msg = BRACED_PATTERN.sub(
                f"{Style.DIM}{{\\1}}{Style.RESET_ALL}", record.msg
            )
        try:
            return super().format(record)
        finally:
            record.levelname = orig_levelname
            record.msg = orig_msg


class CleanFormatter(logging.Formatter):
    """Formatter that strips highlight markers, used for log files."""

    def format(self, record: logging.LogRecord) -> str:
        """Formats a log record without highlight markers."""
        if not isinstance(record.msg, str):
            return super().format(record)

        orig_msg = record.msg
        record.msg = strip_markers(record.msg)
        try:
            return super().format(record)
        finally:
            record.msg = orig_msg


class Logger(logging.Logger):
    """Logger with a SUCCESS level and automatic class name prefixes."""

    SUCCESS = logging.INFO + 5

    def __init__(self, name, level=logging.NOTSET):
        """Initialize the logger and register the SUCCESS level name."""
        super().__init__(name, level)
        if logging.getLevelName(self.SUCCESS) != "SUCCESS":
            logging.addLevelName(self.SUCCESS, "SUCCESS")

    def _log(
        self,
        level,
        msg,
        args,
        exc_info=None,
        extra=None,
        stack_info=False,
        stacklevel=1,
    ):
        """Prefix messages logged from within a method with the class name.

        Frame 2 is the caller of the public logging method (info, debug, ...).
        """
        try:
            frame = sys._getframe(2)
            class_name = None
            if "self" in frame.f_locals:
                obj = frame.f_locals["self"]
                if not isinstance(obj, logging.Logger):
                    class_name = obj.__class__.__name__
            elif "cls" in frame.f_locals and isinstance(frame.f_locals["cls"], type):
                class_name = frame.f_locals["cls"].__name__

            if class_name and isinstance(msg, str):
                msg = f"{class_name}: {msg}"
        except (ValueError, KeyError, AttributeError):
            pass

        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=extra,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )

    def success(self, msg, *args, **kwargs):
        """Log a message with SUCCESS level."""
        if self.isEnabledFor(self.SUCCESS):
            self._log(self.SUCCESS, msg, args, **kwargs)

    def setup(self, log_level: str, log_dir: Path | None = None) -> None:
        """Attach console and (optionally) rotating file handlers.

        Args:
            log_level (str): Logging level ('DEBUG', 'INFO', 'SUCCESS', etc.)
            log_dir (Path | None): Directory for log files, no file output if None
        """
        level = self.SUCCESS if log_level == "SUCCESS" else getattr(logging, log_level)
        self.setLevel(level)

        for handler in self.handlers[:]:
            self.removeHandler(handler)

        log_format = (
            "%(asctime)s - %(name)s - %(levelname)s\t%(filename)s:%(lineno)d\t"
            "%(message)s"
            if level <= logging.DEBUG
            else "%(asctime)s - %(name)s - %(levelname)s\t%(message)s"
        )

        use_color = False
        if supports_color():
            try:
                if sys.platform == "win32":
                    colorama.just_fix_windows_console()
                use_color = True
            except (AttributeError, OSError):
                use_color = False

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            ColorFormatter(log_format, datefmt=_DATE_FORMAT)
            if use_color
            else CleanFormatter(log_format, datefmt=_DATE_FORMAT)
        )
        console_handler.setLevel(level)
        self.addHandler(console_handler)

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_dir / f"{self.name}.{log_level}.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(CleanFormatter(log_format, datefmt=_DATE_FORMAT))
            file_handler.setLevel(level)
            self.addHandler(file_handler)


logging.setLoggerClass(Logger)


def _get_logger(
    log_name: str, log_level: str = "INFO", log_dir: Path | None = None
) -> Logger:
    """Get a configured Logger instance.

    Args:
        log_name (str): Name of the logger and base name of its log file
        log_level (str): Logging level. Defaults to "INFO".
        log_dir (Path | None): Directory where log files will be stored

    Returns:
        Logger: Configured logger instance
    """
    logger = logging.getLogger(log_name)
    if not isinstance(logger, Logger):
        logger = Logger(log_name)
    logger.setup(log_level, log_dir)
    return logger


@lru_cache(maxsize=1)
def get_logger() -> Logger:
    """Get the main application logger configured from the settings."""
    from mediashelf.config.settings import get_config

    config = get_config()
    return _get_logger(
        log_name="MediaShelf",
        log_level=str(config.log_level),
        log_dir=config.data_path / "logs",
    )
