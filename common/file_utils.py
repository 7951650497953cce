# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: atomic writes, ownership, archives, symlinks.
"""

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Optional, Union

from setup.config_models import AppSettings

from .command_utils import get_symbols, log_installer, run_elevated_command

module_logger = logging.getLogger(__name__)


def atomic_write_text(
    file_path: Union[str, Path],
    content: str,
    mode: int = 0o640,
) -> None:
    """
    Writes `content` to `file_path` so that readers see either the old file
    or the complete new one.

    The content goes to a temporary file in the same directory, is flushed
    and fsynced, then renamed over the target.

    Raises:
        OSError: If the directory cannot be written.
    """
    target = Path(file_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as temp_f:
            temp_f.write(content)
            temp_f.flush()
            os.fsync(temp_f.fileno())
        os.chmod(temp_path, mode)
        os.replace(temp_path, target)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def make_executable(file_path: Union[str, Path]) -> None:
    """Adds the execute bits to `file_path`."""
    current = os.stat(file_path).st_mode
    os.chmod(file_path, current | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def chown_recursive(
    dir_path: Union[str, Path],
    owner: str,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Recursively gives `dir_path` to `owner` (user and group of the same name).

    Raises:
        subprocess.CalledProcessError: If chown fails.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    run_elevated_command(
        ["chown", "-R", f"{owner}:{owner}", str(dir_path)],
        app_settings,
        current_logger=logger_to_use,
    )
    log_installer(
        f"{symbols.get('success', '✅')} Ownership of {dir_path} set to {owner}.",
        "debug",
        logger_to_use,
        app_settings,
    )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    """Unpacks `archive_path` into `destination` and returns the destination."""
    logger_to_use = current_logger if current_logger else module_logger
    dest = Path(destination)
    dest.mkdir(parents=True, exist_ok=True)
    logger_to_use.info(f"Extracting {archive_path} to {dest}")
    shutil.unpack_archive(str(archive_path), str(dest))
    return dest


def update_symlink(target: Union[str, Path], link_path: Union[str, Path]) -> None:
    """Points `link_path` at `target`, replacing an existing link atomically."""
    link = Path(link_path)
    temp_link = link.with_name(f".{link.name}.tmp")
    if temp_link.is_symlink() or temp_link.exists():
        temp_link.unlink()
    os.symlink(str(target), str(temp_link))
    os.replace(temp_link, link)
