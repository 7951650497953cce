"""
Preflight checks.

Each check is a small object with a unique name and a probe. Checks are
built fresh for every run (see check_sets.py) and never persisted.
"""

import sys
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel

from common import system_utils
from setup.config_models import AppSettings
from ybactl.state_manager import load_state


class CheckStatus(str, Enum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"
    SKIPPED = "skipped"


class CheckResult(BaseModel):
    """Outcome of one preflight check."""

    name: str
    status: CheckStatus
    detail: str = ""


class Check(ABC):
    """Base class for preflight checks."""

    name: str = ""
    description: str = ""

    @abstractmethod
    def execute(self, app_settings: AppSettings) -> CheckResult:
        """Runs the probe. Exceptions are turned into failures by the runner."""

    def _result(self, status: CheckStatus, detail: str = "") -> CheckResult:
        return CheckResult(name=self.name, status=status, detail=detail)


class UserCheck(Check):
    name = "user"
    description = "Running as root, or as a user that can run the services without root."

    def execute(self, app_settings: AppSettings) -> CheckResult:
        if system_utils.has_sudo_access():
            return self._result(CheckStatus.PASS)
        return self._result(
            CheckStatus.WARNING,
            f"not running as root; services will run as {system_utils.get_current_user()} "
            "and will not be registered with systemd system-wide",
        )


class PythonCheck(Check):
    name = "python"
    description = "Supported Python interpreter."

    def execute(self, app_settings: AppSettings) -> CheckResult:
        required = tuple(int(p) for p in app_settings.preflight.min_python.split("."))
        current = sys.version_info[: len(required)]
        found = ".".join(str(p) for p in sys.version_info[:3])
        if current < required:
            return self._result(
                CheckStatus.FAIL,
                f"python {app_settings.preflight.min_python}+ required, found {found}",
            )
        return self._result(CheckStatus.PASS, f"python {found}")


class DiskSpaceCheck(Check):
    name = "disk_space"
    description = "Enough free disk under the install root."

    def execute(self, app_settings: AppSettings) -> CheckResult:
        free = system_utils.free_disk_gb(app_settings.install_root)
        required = app_settings.preflight.min_disk_gb
        if free < required:
            return self._result(
                CheckStatus.FAIL,
                f"{free:.1f} GB free under {app_settings.install_root}, {required} GB required",
            )
        return self._result(CheckStatus.PASS, f"{free:.1f} GB free")


class CpuCheck(Check):
    name = "cpu"
    description = "Enough CPU cores."

    def execute(self, app_settings: AppSettings) -> CheckResult:
        cores = system_utils.cpu_count()
        required = app_settings.preflight.min_cpus
        if cores < required:
            return self._result(CheckStatus.FAIL, f"{cores} cores found, {required} required")
        return self._result(CheckStatus.PASS, f"{cores} cores")


class MemoryCheck(Check):
    name = "memory"
    description = "Enough physical memory."

    def execute(self, app_settings: AppSettings) -> CheckResult:
        memory = system_utils.total_memory_gb()
        required = app_settings.preflight.min_memory_gb
        if memory < required:
            return self._result(CheckStatus.FAIL, f"{memory:.1f} GB memory, {required} GB required")
        return self._result(CheckStatus.PASS, f"{memory:.1f} GB memory")


class PortsCheck(Check):
    name = "ports"
    description = "Service ports are free."

    def __init__(self, ports: Sequence[int]):
        self.ports = list(ports)

    def execute(self, app_settings: AppSettings) -> CheckResult:
        busy = [port for port in self.ports if not system_utils.is_port_free(port)]
        if busy:
            return self._result(
                CheckStatus.FAIL, f"ports in use: {', '.join(str(p) for p in busy)}"
            )
        return self._result(CheckStatus.PASS)


class InstallExistsCheck(Check):
    name = "install_exists"
    description = "The state file records no completed installation."

    def execute(self, app_settings: AppSettings) -> CheckResult:
        # A failed install leaves the version empty, so it can be rerun.
        state = load_state(app_settings.state_file)
        if state.version:
            return self._result(
                CheckStatus.FAIL,
                f"{app_settings.state_file} records installed version {state.version}",
            )
        return self._result(CheckStatus.PASS)


class InstalledCheck(Check):
    name = "installed_state"
    description = "An installation exists to operate on."

    def execute(self, app_settings: AppSettings) -> CheckResult:
        if app_settings.installed_marker.exists() or app_settings.state_file.exists():
            return self._result(CheckStatus.PASS)
        return self._result(
            CheckStatus.FAIL, f"no installation found under {app_settings.ybactl_root}"
        )


class LicenseCheck(Check):
    name = "license"
    description = "A license is provided or already installed."

    def __init__(self, license_path: Optional[Path] = None):
        self.license_path = license_path

    def execute(self, app_settings: AppSettings) -> CheckResult:
        if self.license_path is not None:
            if not Path(self.license_path).is_file():
                return self._result(CheckStatus.FAIL, f"license file {self.license_path} not found")
            return self._result(CheckStatus.PASS, str(self.license_path))
        if app_settings.license_file.is_file():
            return self._result(CheckStatus.PASS, str(app_settings.license_file))
        return self._result(
            CheckStatus.WARNING, "no license provided; pass one with --license-path"
        )


class PostgresConfigCheck(Check):
    name = "postgres_config"
    description = "Postgres settings are complete for the configured mode."

    def execute(self, app_settings: AppSettings) -> CheckResult:
        existing = app_settings.postgres.use_existing
        if not existing.enabled:
            return self._result(CheckStatus.PASS, "postgres installed by yba-ctl")
        if not existing.username or not existing.host:
            return self._result(
                CheckStatus.FAIL, "postgres.use_existing requires host and username"
            )
        missing: List[str] = [
            key for key in ("pg_dump_path", "pg_restore_path") if not getattr(existing, key)
        ]
        if missing:
            return self._result(
                CheckStatus.WARNING,
                f"postgres.use_existing.{' and '.join(missing)} not set; backup/restore will not work",
            )
        return self._result(CheckStatus.PASS, f"existing postgres at {existing.host}:{existing.port}")


class BackupScriptCheck(Check):
    name = "backup_script"
    description = "The backup script is present."

    def __init__(self, script_path: Path):
        self.script_path = Path(script_path)

    def execute(self, app_settings: AppSettings) -> CheckResult:
        if not self.script_path.is_file():
            return self._result(CheckStatus.FAIL, f"backup script {self.script_path} not found")
        return self._result(CheckStatus.PASS, str(self.script_path))
