"""Logging setup for the translation updater command-line tool."""

import logging
import sys
import time
from logging import FileHandler
from pathlib import Path

_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class _UTCFormatter(logging.Formatter):
    """Formatter emitting ISO 8601 UTC timestamps with microseconds."""

    converter = time.gmtime

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        """Format the time with 6-digit microseconds and a 'Z' for UTC."""
        ct = self.converter(record.created)
        s = time.strftime(datefmt, ct) if datefmt else time.strftime(self.default_time_format, ct)
        microseconds = int((record.created - int(record.created)) * 1_000_000)
        return f"{s}.{microseconds:06d}Z"


class ConsoleFormatter(_UTCFormatter):
    """A compact formatter for console output."""

    def __init__(self, version: str) -> None:
        """
        Initialize the formatter with the application version.

        Args:
            version: The application version shown on every line.

        """
        super().__init__(
            fmt=f"%(asctime)s | GP Translation Updater - {version} | %(levelname)s | %(message)s",
            datefmt=_DATE_FORMAT,
        )


class FileFormatter(_UTCFormatter):
    """A detailed formatter for debug log files."""

    def __init__(self) -> None:
        """Initialize the detailed file formatter."""
        super().__init__(
            fmt="%(asctime)s | %(name)-36s | %(funcName)-24s:%(lineno)-4d | %(levelname)-8s | %(message)s",
            datefmt=_DATE_FORMAT,
        )


def setup_logging(version: str, *, debug: bool = False, log_file: Path | None = None) -> None:
    """
    Configure the root logger.

    Console output goes to stderr so that stdout stays clean for the JSON
    the CLI prints. When `debug` is set and `log_file` is given, a detailed
    DEBUG log is written there as well.

    Args:
        version: The application version, included in console logs.
        debug: If True, lowers the console level to DEBUG and enables the file log.
        log_file: Where to write the detailed debug log.

    """
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    level = logging.DEBUG if debug else logging.INFO
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ConsoleFormatter(version))
    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)

    if debug and log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = FileHandler(log_file, mode="w", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(FileFormatter())
            root_logger.addHandler(file_handler)
            root_logger.info("Debug mode enabled. Detailed logs will be written to %s", log_file)
        except OSError:
            root_logger.exception("Failed to create debug log file. Continuing with console logging only.")
