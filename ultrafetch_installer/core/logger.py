# ultrafetch_installer/core/logger.py

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

# Default log format
DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)-22s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_PREFIX = "ultrafetch_install_"


class LoggerProxy:
    """
    Lazy logger accessor to avoid boilerplate logger setup in each module.
    Usage: log = LoggerProxy(__name__)
    """

    def __init__(self, name: str):
        self._name = name
        self._logger: logging.Logger | None = None

    def _get_logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = logging.getLogger(self._name)
        assert self._logger is not None
        return self._logger

    def __getattr__(self, item: str) -> Any:
        return getattr(self._get_logger(), item)


def log_file_path(log_dir: Path, now: datetime | None = None) -> Path:
    """Timestamped log file name, one per installer run."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return log_dir / f"{LOG_FILE_PREFIX}{stamp}.log"


def setup_logging(
    level_name: str = "INFO",
    log_dir: Path | None = None,
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    verbose: bool = False,
) -> Path | None:
    """
    Sets up logging with rich console output and a plain-text run log.

    Args:
        level_name: Root log level name (INFO, DEBUG, ...).
        log_dir: Directory for the timestamped log file; None disables it.
        log_format: Format used by the file handler.
        date_format: Timestamp format used by the file handler.
        verbose: Whether to enable DEBUG logging regardless of level_name.

    Returns:
        Path of the log file, or None if file logging is off or failed.
    """
    level_str = "DEBUG" if verbose else level_name.upper()
    level = getattr(logging, level_str, logging.INFO)

    console_handler = RichHandler(
        rich_tracebacks=True, markup=True, show_time=False, show_path=False
    )
    console_handler.setLevel(level)
    handlers: list[logging.Handler] = [console_handler]

    # File handler keeps DEBUG output (command stdout/stderr) for post-mortems;
    # a log we cannot write must never stop the install
    log_path: Path | None = None
    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_file_path(log_dir)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(log_format, date_format))
            handlers.append(file_handler)
        except OSError as e:
            print(
                f"ERROR: Could not set up file logging at {log_dir}: {e}",
                file=sys.stderr,
            )
            log_path = None

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers.clear()

    logging.basicConfig(
        level=logging.DEBUG, format="%(message)s", datefmt=date_format, handlers=handlers
    )

    LoggerProxy(__name__).debug(
        f"Logging initialized. Level: {level_str}. Log file: {log_path or 'disabled'}"
    )
    return log_path
