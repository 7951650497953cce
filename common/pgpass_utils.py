# common/pgpass_utils.py
# -*- coding: utf-8 -*-
"""
Writes the .pgpass scratch file handed to the backup/restore script.

The file holds a single credential line and is rewritten from scratch on
every use, with owner-only permissions, so no stale entry from an earlier run
survives.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from setup.config_models import AppSettings

from .command_utils import get_symbols, log_installer

module_logger = logging.getLogger(__name__)

PGPASS_MODE = 0o600


def format_pgpass_entry(
    host: str, port: Union[int, str], database: str, user: str, password: str
) -> str:
    """
    Returns a single `host:port:database:user:password` line.

    Backslashes and colons inside a field are escaped with a backslash, as
    libpq reads them.
    """
    fields = (host, port, database, user, password)
    return ":".join(_escape_pgpass_field(str(field)) for field in fields)


def _escape_pgpass_field(value: str) -> str:
    return value.replace("\\", "\\\\").replace(":", "\\:")


def write_pgpass_file(
    pgpass_path: Union[str, Path],
    host: str,
    port: Union[int, str],
    database: str,
    user: str,
    password: str,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Creates or truncates `pgpass_path` and writes one credential line to it.

    The file is opened with mode 0600 and chmod'ed again afterwards, since
    os.open only applies the mode when it creates the file.

    Returns:
        The path that was written.

    Raises:
        OSError: If the file cannot be written.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    path = Path(pgpass_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    entry = format_pgpass_entry(host, port, database, user, password)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, PGPASS_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f_write:
        f_write.write(entry + "\n")
    os.chmod(path, PGPASS_MODE)

    log_installer(
        f"{symbols.get('success', '')} Credential file written to {path} for user {user}.",
        "debug",
        logger_to_use,
        app_settings,
    )
    return path
