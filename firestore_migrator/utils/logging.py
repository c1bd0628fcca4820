"""
Logging module for the Firestore to Supabase migration tool
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from firestore_migrator.constants import LOG_FILE_PREFIX, RUN_TIMESTAMP_FORMAT

LOGGER_NAME = "firestore_migrator"


def _iso_utc(created: float) -> str:
    dt = datetime.fromtimestamp(created, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EnhancedFormatter(logging.Formatter):
    """
    Custom formatter that supports verbose mode (with module and line
    information) and appends any ``record_id``/``reason`` context attached
    through :func:`log_with_context`.
    """

    def __init__(
        self,
        fmt=None,
        datefmt=None,
        style="%",
        verbose=False,
        include_context=False,
    ):
        if verbose:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s"
        elif not fmt:
            fmt = "%(asctime)s - %(levelname)s - %(message)s"

        super().__init__(fmt, datefmt, style)
        self.include_context = include_context

    def format(self, record):
        result = super().format(record)

        if self.include_context:
            reason = getattr(record, "reason", None)
            if reason:
                result += f" (reason: {reason})"

        return result


class RunLineFormatter(logging.Formatter):
    """Formats run log lines as ``[<ISO-8601 timestamp>] <message>``."""

    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(message)s")

    def formatTime(self, record, datefmt=None):
        return _iso_utc(record.created)


def setup_logger(verbose: bool = False) -> logging.Logger:
    """
    Set up and return the package logger with console output.

    Args:
        verbose: If True, set console handler to DEBUG level; otherwise INFO level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Clear any existing handlers to prevent duplicate messages
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(
        EnhancedFormatter(verbose=verbose, include_context=True)
    )
    logger.addHandler(console_handler)

    return logger


def log_with_context(level: int, message: str, **kwargs: Any) -> None:
    """
    Log a message on the package logger with additional context information.

    Args:
        level: The logging level (e.g., logging.INFO)
        message: The log message
        **kwargs: Additional context to include in the log record
    """
    exc_info = kwargs.pop("exc_info", None)
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    logging.getLogger(LOGGER_NAME).log(
        level, message, exc_info=exc_info, extra=filtered_kwargs
    )


class RunLogger:
    """Append-only audit log for a single migration run.

    Every line goes to both the console and a durable file named after the
    run's start time, formatted as ``[<ISO-8601 timestamp>] <message>``.
    The logger is created once before the first phase and closed after the
    last one (or after a fatal error); ``close()`` flushes every handler.

    Concurrent ``log()`` calls are serialized by the handler locks of the
    ``logging`` module, so lines never interleave.
    """

    def __init__(
        self,
        log_path: Optional[Path] = None,
        verbose: bool = False,
        console: bool = True,
    ) -> None:
        self.log_path = log_path
        name = f"{LOGGER_NAME}.run.{id(self)}"
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._closed = False

        for handler in self._logger.handlers[:]:
            self._logger.removeHandler(handler)

        formatter = RunLineFormatter()
        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            console_handler.setFormatter(formatter)
            self._logger.addHandler(console_handler)

        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            self._logger.addHandler(file_handler)

    @classmethod
    def open(
        cls,
        log_dir: Path | str,
        started_at: Optional[datetime] = None,
        verbose: bool = False,
        console: bool = True,
    ) -> RunLogger:
        """Open a run log in *log_dir* named by the run's start timestamp.

        Args:
            log_dir: Directory for run logs (created if missing)
            started_at: Run start time; defaults to now (UTC)
            verbose: Show DEBUG lines on the console
            console: Mirror lines to the console

        Returns:
            An open RunLogger
        """
        started_at = started_at or datetime.now(timezone.utc)
        stamp = started_at.strftime(RUN_TIMESTAMP_FORMAT)
        log_path = Path(log_dir) / f"{LOG_FILE_PREFIX}-{stamp}.log"
        run_logger = cls(log_path, verbose=verbose, console=console)
        return run_logger

    @property
    def closed(self) -> bool:
        return self._closed

    def log(self, message: str, level: int = logging.INFO, **context: Any) -> None:
        """Write one line to the console and the durable sink."""
        if self._closed:
            raise ValueError("log() called on a closed RunLogger")
        extras = {k: v for k, v in context.items() if v is not None}
        self._logger.log(level, message, extra=extras)

    def flush(self) -> None:
        for handler in self._logger.handlers:
            handler.flush()

    def close(self) -> None:
        """Flush and detach every handler. Safe to call more than once."""
        if self._closed:
            return
        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
        self._closed = True

    def __enter__(self) -> RunLogger:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def get_logger():
    """Get the firestore_migrator logger, creating it with defaults if needed."""
    pkg_logger = logging.getLogger(LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(EnhancedFormatter())
        pkg_logger.addHandler(handler)
    return pkg_logger


# Module logger - will be properly initialized when setup_logger is called
logger = get_logger()
