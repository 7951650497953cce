"""
Named preflight check sets, one per lifecycle operation.

The builders return fresh check objects on every call.
"""

from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from setup.config_models import AppSettings
from ybactl.preflight.checks import (
    BackupScriptCheck,
    Check,
    CpuCheck,
    DiskSpaceCheck,
    InstallExistsCheck,
    InstalledCheck,
    LicenseCheck,
    MemoryCheck,
    PortsCheck,
    PostgresConfigCheck,
    PythonCheck,
    UserCheck,
)

INSTALL_CHECKS = "install"
INSTALL_CHECKS_WITH_POSTGRES = "install_with_postgres"
UPGRADE_CHECKS = "upgrade"
BACKUP_CHECKS = "backup"
RESTORE_CHECKS = "restore"


class PreflightCheckSet:
    """An ordered collection of uniquely named checks."""

    def __init__(self, name: str, checks: Sequence[Check]):
        names = [check.name for check in checks]
        if len(names) != len(set(names)):
            raise ValueError(f"check set '{name}' contains duplicate check names: {names}")
        self.name = name
        self.checks: List[Check] = list(checks)

    def names(self) -> List[str]:
        return [check.name for check in self.checks]

    def __iter__(self) -> Iterator[Check]:
        return iter(self.checks)

    def __len__(self) -> int:
        return len(self.checks)


def _common_install_checks(license_path: Optional[Path]) -> List[Check]:
    return [
        UserCheck(),
        PythonCheck(),
        InstallExistsCheck(),
        LicenseCheck(license_path),
        DiskSpaceCheck(),
        CpuCheck(),
        MemoryCheck(),
        PostgresConfigCheck(),
    ]


def install_check_set(
    app_settings: AppSettings, license_path: Optional[Path] = None
) -> PreflightCheckSet:
    """Checks for install. Includes the postgres port when yba-ctl installs postgres."""
    ports = [app_settings.platform.port, app_settings.prometheus.port]
    name = INSTALL_CHECKS
    if app_settings.postgres.install.enabled:
        ports.append(app_settings.postgres.install.port)
        name = INSTALL_CHECKS_WITH_POSTGRES
    checks = _common_install_checks(license_path) + [PortsCheck(ports)]
    return PreflightCheckSet(name, checks)


def upgrade_check_set() -> PreflightCheckSet:
    # Services are running during an upgrade, so their ports are not checked.
    return PreflightCheckSet(
        UPGRADE_CHECKS,
        [UserCheck(), PythonCheck(), LicenseCheck(), DiskSpaceCheck(), PostgresConfigCheck()],
    )


def backup_check_set(script_path: Path) -> PreflightCheckSet:
    return PreflightCheckSet(
        BACKUP_CHECKS,
        [InstalledCheck(), PostgresConfigCheck(), BackupScriptCheck(script_path)],
    )


def restore_check_set(script_path: Path) -> PreflightCheckSet:
    return PreflightCheckSet(
        RESTORE_CHECKS,
        [InstalledCheck(), PostgresConfigCheck(), BackupScriptCheck(script_path), DiskSpaceCheck()],
    )
