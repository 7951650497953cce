# setup/config.py
"""
Centralized constants and default values for yba-ctl.

This module defines the static layout of an installation (directory and
file names relative to the configured roots), the managed service names and
their dependency order, and the location of the bundle this copy of yba-ctl
was shipped in.
"""

from pathlib import Path
from typing import List

# --- Bundle Layout ---
# Root of the bundle (or installed copy) this module was loaded from.
BUNDLE_ROOT: Path = Path(__file__).resolve().parent.parent
VERSION_METADATA_FILE: Path = BUNDLE_ROOT / "version_metadata.json"
PACKAGES_DIR: Path = BUNDLE_ROOT / "packages"

# --- Default Roots ---
INSTALL_ROOT_DEFAULT: str = "/opt/yugabyte"
YBACTL_ROOT_DEFAULT: str = "/opt/yba-ctl"
CONFIG_FILE_DEFAULT: str = "/opt/yba-ctl/yba-ctl.yml"
SERVICE_USERNAME_DEFAULT: str = "yugabyte"

# --- Files under the yba-ctl root ---
YBACTL_BINARY_NAME: str = "yba-ctl"
STATE_FILE_NAME: str = ".yba_installer.state"
INSTALLED_MARKER_NAME: str = ".installCompleted"
INSTALL_STARTED_MARKER_NAME: str = ".installStarted"
PGPASS_FILE_NAME: str = ".pgpass"
LOCK_FILE_NAME: str = ".lock"
LOG_FILE_NAME: str = "yba-ctl.log"
LICENSE_FILE_NAME: str = "yba.lic"

# --- Directories under the install root ---
SOFTWARE_DIR_NAME: str = "software"
DATA_DIR_NAME: str = "data"
ACTIVE_SYMLINK_NAME: str = "active"

# --- Managed Services ---
POSTGRES_SERVICE_NAME: str = "postgres"
PROMETHEUS_SERVICE_NAME: str = "prometheus"
PLATFORM_SERVICE_NAME: str = "yb-platform"

# Startup order. Dependencies come first; stop-all walks this backwards.
SERVICE_ORDER: List[str] = [
    POSTGRES_SERVICE_NAME,
    PROMETHEUS_SERVICE_NAME,
    PLATFORM_SERVICE_NAME,
]

SYSTEMD_UNIT_DIR: Path = Path("/etc/systemd/system")

# Database restored by a yugabundle restore.
PLATFORM_DATABASE_NAME: str = "yugaware"

BACKUP_SCRIPT_RELATIVE_PATH: str = "devops/bin/yb_platform_backup.sh"
