# common/system_utils.py
# -*- coding: utf-8 -*-
"""
System probes (user, disk, memory, ports) and systemd helpers.
"""

import getpass
import logging
import os
import shutil
import socket
import sys
from pathlib import Path
from typing import Optional

from setup.config_models import AppSettings

from .command_utils import get_symbols, log_installer, run_elevated_command

module_logger = logging.getLogger(__name__)


def get_current_user() -> str:
    """Name of the user running yba-ctl."""
    return getpass.getuser()


def has_sudo_access() -> bool:
    """True when running as root, i.e. yba-ctl may manage other users' files and system units."""
    return os.geteuid() == 0


def run_from_installed(app_settings: AppSettings, executable: Optional[str] = None) -> bool:
    """
    True if this process was started from the installed copy of yba-ctl
    (under ybactl_root) rather than from a freshly unpacked bundle.
    """
    exe_path = Path(executable or sys.argv[0]).resolve()
    installed_root = Path(app_settings.ybactl_root).resolve()
    return installed_root == exe_path or installed_root in exe_path.parents


def free_disk_gb(path: Path) -> float:
    """Free space in GiB on the filesystem holding `path` (or its nearest existing parent)."""
    probe = Path(path)
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    return shutil.disk_usage(probe).free / (1024 ** 3)


def total_memory_gb() -> float:
    """Physical memory in GiB."""
    return os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES") / (1024 ** 3)


def cpu_count() -> int:
    return os.cpu_count() or 1


def is_port_free(port: int, host: str = "0.0.0.0") -> bool:
    """True if nothing is listening on `port`."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def systemd_reload(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """
    Reload the systemd daemon.

    Raises:
        subprocess.CalledProcessError: If systemctl fails.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    log_installer(
        f"{symbols.get('gear', '⚙️')} Reloading systemd daemon...",
        "debug",
        logger_to_use,
        app_settings,
    )
    run_elevated_command(
        ["systemctl", "daemon-reload"],
        app_settings,
        current_logger=logger_to_use,
    )
