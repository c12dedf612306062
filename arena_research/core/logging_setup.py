"""Logging configuration for arena-research.

This module defines the logging infrastructure:
- Console logging to stderr (stdout is reserved for command output)
- Optional rotating log file
- Structured JSON logging for machine parsing
- Operation timing via ``log_performance``

The CLI calls ``configure_logging`` once at startup.
"""

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields passed as extra={"extra_fields": {...}}
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data)


@contextmanager
def log_performance(operation: str, logger: Optional[logging.Logger] = None) -> Iterator[None]:
    """Context manager for logging operation performance.

    Args:
        operation: Name of the operation
        logger: Logger to use (default: root logger)

    Example:
        with log_performance("search"):
            page = await router.search(query, options, token)
    """
    if logger is None:
        logger = logging.getLogger()

    start_time = time.time()
    success = False
    try:
        yield
        success = True
    finally:
        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            f"{operation} completed in {duration_ms:.2f}ms (success={success})",
            extra={
                "extra_fields": {
                    "event_type": "performance",
                    "operation": operation,
                    "duration_ms": round(duration_ms, 2),
                    "success": success,
                }
            },
        )


def configure_logging(
    log_file: Optional[Path] = None,
    level: int = logging.WARNING,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    use_json: bool = False,
    console_output: bool = True,
    fmt: str = DEFAULT_FORMAT,
) -> None:
    """Configure root logging handlers with optional JSON formatting.

    Parameters
    ----------
    log_file: Path, optional
        If provided, logs will be written to this file with rotation.  The
        directory will be created if it does not exist.
    level: int
        Logging level (e.g. ``logging.INFO`` or ``logging.DEBUG``).
    max_bytes: int
        Maximum size of each log file before rotation.
    backup_count: int
        Number of rotated log files to keep.
    use_json: bool
        If True, use JSON structured logging format.
    console_output: bool
        If True, log to stderr.
    fmt: str
        Format string for the plain-text formatter.
    """
    # Prevent duplicate handlers if configure_logging is called multiple times
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(level)

    if use_json:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S")

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # httpx logs every request at INFO; keep it quiet unless debugging
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
