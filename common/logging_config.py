# -*- coding: utf-8 -*-
"""
Logging configuration for yba-ctl.

Console output is human-readable. When a log file is configured, every record
is also written there as one JSON object per line, so the history of install,
upgrade, backup and restore runs on a host can be inspected after the fact.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

# Attributes every LogRecord carries; anything else was passed via `extra`.
_RESERVED_RECORD_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "message",
    ]
)


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON with a consistent structure:
    timestamp, level, service, logger, message, source location, and any
    extra fields attached to the record.
    """

    def __init__(self, service_name: str = "yba-ctl"):
        super().__init__()
        self.service_name = service_name
        self.hostname = os.uname().nodename

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "hostname": self.hostname,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(
    service_name: str = "yba-ctl",
    log_level: Optional[str] = None,
    enable_console: bool = True,
    log_file_path: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Set up logging for yba-ctl.

    Args:
        service_name: Name of the top-level logger.
        log_level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Falls
            back to the LOG_LEVEL environment variable, then INFO.
        enable_console: Whether to log to stdout.
        log_file_path: JSON-lines log file. Skipped with a warning if its
            directory cannot be written.

    Returns:
        The configured service logger.
    """
    if log_level is None:
        log_level = os.environ.get("LOG_LEVEL", "INFO")

    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
        log_level = "INFO"

    root_logger = logging.getLogger()
    # The file always receives debug output; the console honours log_level.
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(console_handler)

    logger = logging.getLogger(service_name)

    file_enabled = False
    if log_file_path:
        try:
            Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(JSONFormatter(service_name))
            root_logger.addHandler(file_handler)
            file_enabled = True
        except OSError as e:
            logger.warning(f"Could not open log file {log_file_path}: {e}")

    logger.debug(
        "Logging initialized",
        extra={
            "log_level": log_level,
            "console_enabled": enable_console,
            "file_enabled": file_enabled,
        },
    )
    return logger
