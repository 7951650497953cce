"""
Base class for all services managed by yba-ctl.

Every managed service (postgres, prometheus, yb-platform) implements the same
lifecycle contract: install, upgrade, start, stop, restart and status. The
orchestrator only ever talks to services through this interface.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from common.command_utils import (
    get_symbols,
    log_installer,
    run_command,
    run_elevated_command,
)
from common.exceptions import ServiceOperationError
from common.file_utils import atomic_write_text
from common.system_utils import get_current_user, has_sudo_access, systemd_reload
from setup import config as static_config
from setup.config_models import AppSettings


class StatusType(str, Enum):
    """Health classification of a managed service."""

    RUNNING = "running"
    DEGRADED = "degraded"
    STOPPED = "stopped"
    NOT_INSTALLED = "not_installed"


class ServiceStatus(BaseModel):
    """Observed status of one service. Re-derived on every query, never stored."""

    service: str
    status: StatusType
    version: str = ""
    port: Optional[int] = None
    config_path: Optional[str] = None
    detail: str = ""


def is_happy_status(status: ServiceStatus) -> bool:
    """True if the service is healthy enough for install/upgrade to succeed."""
    return status.status == StatusType.RUNNING


# systemctl is-active output -> health
_SYSTEMD_STATE_MAP = {
    "active": StatusType.RUNNING,
    "activating": StatusType.DEGRADED,
    "reloading": StatusType.DEGRADED,
    "deactivating": StatusType.DEGRADED,
    "failed": StatusType.DEGRADED,
    "inactive": StatusType.STOPPED,
}


class BaseService(ABC):
    """
    Base class for managed services.

    Subclasses are registered with ServiceRegistry.register, which also sets
    `name`. Start, stop, restart and status are implemented on top of
    systemd; install and upgrade are service specific. Failures are raised
    as ServiceOperationError.
    """

    name: str = ""

    def __init__(
        self,
        app_settings: AppSettings,
        version: str,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            app_settings: The application settings.
            version: Version of the bundle being installed or managed.
            logger: Optional logger instance.
        """
        self.app_settings = app_settings
        self.version = version
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.symbols = get_symbols(app_settings)

    # --- Lifecycle contract ---

    @abstractmethod
    def install(self) -> None:
        """Install and start the service. Safe to run again on an installed service."""

    @abstractmethod
    def upgrade(self) -> None:
        """Upgrade the service in place. The orchestrator restarts it afterwards."""

    def start(self) -> None:
        self._systemctl("start")

    def stop(self) -> None:
        self._systemctl("stop")

    def restart(self) -> None:
        self._systemctl("restart")

    def status(self) -> ServiceStatus:
        """Queries systemd for the health of the service."""
        if not self.unit_file.exists():
            return self._make_status(StatusType.NOT_INSTALLED)
        try:
            result = run_elevated_command(
                ["systemctl", "is-active", self.unit_name],
                self.app_settings,
                check=False,
                capture_output=True,
                current_logger=self.logger,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise ServiceOperationError(
                f"Failed to get status of {self.name}: {e}",
                service_name=self.name,
                operation="status",
                original_error=e,
            ) from e
        state = (result.stdout or "").strip()
        health = _SYSTEMD_STATE_MAP.get(state, StatusType.DEGRADED)
        return self._make_status(health, detail=state)

    # --- Layout ---

    @property
    def unit_name(self) -> str:
        return f"{self.name}.service"

    @property
    def unit_file(self) -> Path:
        return static_config.SYSTEMD_UNIT_DIR / self.unit_name

    @property
    def software_dir(self) -> Path:
        """Directory the active version of this service's software lives in."""
        return self.app_settings.active_software_dir / self.name

    @property
    def data_dir(self) -> Path:
        return self.app_settings.data_dir / self.name

    @property
    def conf_dir(self) -> Path:
        return self.data_dir / "conf"

    @property
    def port(self) -> Optional[int]:
        return None

    @property
    def config_path(self) -> Optional[Path]:
        return None

    # --- Helpers for subclasses ---

    def _make_status(self, health: StatusType, detail: str = "") -> ServiceStatus:
        return ServiceStatus(
            service=self.name,
            status=health,
            version=self.version,
            port=self.port,
            config_path=str(self.config_path) if self.config_path else None,
            detail=detail,
        )

    def _fail(self, operation: str, error: Exception) -> ServiceOperationError:
        return ServiceOperationError(
            f"{operation} of {self.name} failed: {error}",
            service_name=self.name,
            operation=operation,
            original_error=error,
        )

    def _systemctl(self, action: str) -> None:
        log_installer(
            f"{self.symbols.get('gear', '⚙️')} systemctl {action} {self.unit_name}",
            "info",
            self.logger,
            self.app_settings,
        )
        try:
            run_elevated_command(
                ["systemctl", action, self.unit_name],
                self.app_settings,
                capture_output=True,
                current_logger=self.logger,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise self._fail(action, e) from e

    def _write_unit(self, unit_content: str) -> None:
        """Writes the systemd unit, reloads systemd and enables the unit."""
        atomic_write_text(self.unit_file, unit_content, mode=0o644)
        systemd_reload(self.app_settings, current_logger=self.logger)
        run_elevated_command(
            ["systemctl", "enable", self.unit_name],
            self.app_settings,
            capture_output=True,
            current_logger=self.logger,
        )

    def _render_unit(self, description: str, exec_start: str, after: str = "network.target") -> str:
        return (
            "[Unit]\n"
            f"Description={description}\n"
            f"After={after}\n\n"
            "[Service]\n"
            f"User={self.app_settings.service_username}\n"
            f"Group={self.app_settings.service_username}\n"
            "Type=simple\n"
            f"ExecStart={exec_start}\n"
            "Restart=always\n"
            "RestartSec=10\n\n"
            "[Install]\n"
            "WantedBy=multi-user.target\n"
        )

    def _run_as_service_user(self, command: List[str]) -> None:
        """Runs `command` as the service user (directly when already that user)."""
        if has_sudo_access() and get_current_user() != self.app_settings.service_username:
            command = ["runuser", "-u", self.app_settings.service_username, "--"] + command
        run_command(
            command,
            self.app_settings,
            capture_output=True,
            current_logger=self.logger,
        )
