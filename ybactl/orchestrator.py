"""
Lifecycle orchestrator for yba-ctl.

Drives install, upgrade, createBackup and restoreBackup (plus start, stop,
restart and status) across the managed services. Every operation follows the
same shape: precondition, preflight gate, work over the registry in
dependency order, post-condition, then state. Failures are raised as
YbaCtlError subclasses and are never retried; nothing is rolled back.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from common.command_utils import get_symbols, log_installer
from common.db_utils import recreate_database
from common.exceptions import (
    PreconditionError,
    PreflightError,
    ScriptError,
    ServiceLookupError,
    ServiceOperationError,
    VersionError,
    YbaCtlError,
)
from common.system_utils import run_from_installed
from common.version_utils import less_versions, read_version_metadata
from setup import cli_handler
from setup import config as static_config
from setup.config_models import AppSettings
from ybactl.backup import BackupRequest, BackupScriptBridge, RestoreRequest
from ybactl.base_service import BaseService, ServiceStatus, is_happy_status
from ybactl.ctl_installer import YbaCtlInstaller
from ybactl.layout import prepare_install_layout
from ybactl.lock import InstallerLock
from ybactl.preflight import (
    PreflightCheckSet,
    backup_check_set,
    install_check_set,
    log_results,
    restore_check_set,
    run_checks,
    should_fail,
    upgrade_check_set,
)
from ybactl.registry import ServiceRegistry
from ybactl.results import StepResult, best_effort
from ybactl.services.platform import PlatformService
from ybactl.services.postgres import resolve_postgres_connection
from ybactl.state_manager import InstallerState, Workflow, load_state, store_state

ConfirmFunc = Callable[[str, bool], bool]


class LifecycleOrchestrator:
    """
    Runs lifecycle operations against one installation.

    Args:
        app_settings: The application settings.
        registry: The services of this installation, in dependency order.
        target_version: Version of the bundle this yba-ctl came from.
        ctl_installer: Installs yba-ctl itself; built from the settings if omitted.
        confirm: Asks the operator a yes/no question; defaults to a terminal prompt.
        executable: Path this process was started from, used to tell a fresh
            bundle from the installed copy. Defaults to sys.argv[0].
        logger: Optional logger instance.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        registry: ServiceRegistry,
        target_version: str,
        ctl_installer: Optional[YbaCtlInstaller] = None,
        confirm: Optional[ConfirmFunc] = None,
        executable: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.registry = registry
        self.target_version = target_version
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.ctl_installer = ctl_installer or YbaCtlInstaller(app_settings, logger=self.logger)
        self.confirm = confirm or self._terminal_confirm
        self.executable = executable
        self.symbols = get_symbols(app_settings)

    # --- Lifecycle operations ---

    def install(
        self,
        skip_preflight: Iterable[str] = (),
        license_path: Optional[Path] = None,
    ) -> List[ServiceStatus]:
        """
        Installs every service, in order, and records the installed version.

        Raises:
            PreconditionError: If already installed or run from the installed copy.
            PreflightError: If a preflight check fails.
            ServiceOperationError: If a service fails to install or is unhealthy afterwards.
            StateError: If the state file cannot be written.
        """
        with self._lock():
            if self.ctl_installer.is_installed():
                raise PreconditionError(
                    "YugabyteDB Anywhere already installed, cannot install twice.", phase="install"
                )
            if self._run_from_installed():
                raise PreconditionError(
                    "install must be run from the yba bundle that is getting installed.",
                    phase="install",
                )

            self._gate(
                install_check_set(self.app_settings, license_path),
                skip_preflight,
                "Preflight checks failed. To skip (not recommended), "
                "rerun the command with --skip_preflight <check name1>,<check name2>",
            )

            if license_path is not None:
                self.ctl_installer.install_license(license_path)

            self.ctl_installer.mark_install_start()
            state = InstallerState(current_workflow=Workflow.INSTALL)
            self._describe_install(state)
            store_state(state, self.app_settings.state_file, self.app_settings, self.logger)

            prepare_install_layout(self.app_settings, self.target_version, self.logger)
            for service in self.registry.services():
                self._service_step(service, "install", service.install)

            self._wait_for_platform()
            statuses = self._verify_statuses(
                "is not running! Install might have failed, please check "
                f"{self.app_settings.log_file}"
            )
            self._install_ctl()

            state.version = self.target_version
            state.current_workflow = None
            store_state(state, self.app_settings.state_file, self.app_settings, self.logger)

            self._report(statuses)
            log_installer(
                f"{self.symbols.get('rocket', '🚀')} Successfully installed YugabyteDB Anywhere!",
                "info",
                self.logger,
                self.app_settings,
            )
            return statuses

    def upgrade(
        self,
        skip_preflight: Iterable[str] = (),
        skip_version_checks: bool = False,
    ) -> List[ServiceStatus]:
        """
        Upgrades every service, in order, restarts them, and records the new
        version once all of them are healthy. Services are upgraded while the
        others keep running; there is no full stop.

        Raises:
            PreconditionError: If run from the installed copy, or the target
                version is not newer than the installed one.
            VersionError: If a version cannot be parsed.
            PreflightError: If a preflight check fails.
            ServiceOperationError: If a service fails to upgrade, restart, or is
                unhealthy afterwards. The new version is not recorded.
            StateError: If the state file cannot be read or written.
        """
        with self._lock():
            if self._run_from_installed():
                raise PreconditionError(
                    "Upgrade must be executed from the target yba bundle, not the existing install",
                    phase="upgrade",
                )

            # Installs predating state tracking have no state file.
            state = load_state(self.app_settings.state_file, self.logger)

            self._gate(
                upgrade_check_set(),
                skip_preflight,
                "preflight failed",
            )

            if skip_version_checks:
                self.logger.warning("Skipping version checks at operator request.")
            else:
                self._check_upgrade_version(state)

            if state.current_workflow == Workflow.UPGRADE:
                self.logger.warning(
                    "A previous upgrade did not complete. Continuing with this upgrade."
                )
            state.current_workflow = Workflow.UPGRADE
            store_state(state, self.app_settings.state_file, self.app_settings, self.logger)

            prepare_install_layout(self.app_settings, self.target_version, self.logger)
            for service in self.registry.services():
                self._service_step(service, "upgrade", service.upgrade)
            for service in self.registry.services():
                self._service_step(service, "restart", service.restart)

            statuses = self._verify_statuses("is not running! upgrade failed")
            self._install_ctl()

            state.version = self.target_version
            state.current_workflow = None
            self._describe_install(state)
            store_state(state, self.app_settings.state_file, self.app_settings, self.logger)

            self._report(statuses)
            log_installer(
                f"{self.symbols.get('rocket', '🚀')} Successfully upgraded YugabyteDB Anywhere to {self.target_version}!",
                "info",
                self.logger,
                self.app_settings,
            )
            return statuses

    def create_backup(
        self,
        request: BackupRequest,
        skip_preflight: Iterable[str] = (),
    ) -> None:
        """
        Runs the backup script.

        Raises:
            PreconditionError: If not run from the installed copy.
            PreflightError: If a preflight check fails.
            ConfigurationError: If the postgres client path is not configured.
            ScriptError: If the backup script fails.
        """
        with self._lock():
            self._require_installed_copy("createBackup")
            self._log_installed_version()
            bridge = self._backup_bridge()
            self._gate(
                backup_check_set(bridge.script_path),
                skip_preflight,
                "preflight failed",
            )
            bridge.create_backup(request)
            log_installer(
                f"{self.symbols.get('success', '✅')} Backup written to {request.output_path}",
                "info",
                self.logger,
                self.app_settings,
            )

    def restore_backup(
        self,
        request: RestoreRequest,
        skip_preflight: Iterable[str] = (),
    ) -> List[StepResult]:
        """
        Restores a backup. A yugabundle restore first drops and recreates the
        yugaware database, after operator confirmation unless skip_dbdrop.

        Returns:
            The best-effort steps that were attempted, with their outcome.

        Raises:
            PreconditionError: If not run from the installed copy.
            PreflightError: If a preflight check fails.
            YbaCtlError: If the operator declines the database drop.
            ConfigurationError: If the postgres client path is not configured.
            DatabaseError: If the database cannot be dropped or recreated.
            ScriptError: If the restore script fails.
            ServiceOperationError: If yb-platform cannot be reconfigured or restarted.
        """
        with self._lock():
            self._require_installed_copy("restoreBackup")
            self._log_installed_version()
            platform = self.registry.get_typed(static_config.PLATFORM_SERVICE_NAME, PlatformService)
            bridge = BackupScriptBridge(self.app_settings, platform, self.logger)
            self._gate(
                restore_check_set(bridge.script_path),
                skip_preflight,
                "preflight failed",
            )
            bridge.check_restore_config()

            steps: List[StepResult] = []
            dropped_database = False
            if request.yugabundle and not request.skip_dbdrop:
                prompt = (
                    f"Restoring from yugabundle will drop the existing "
                    f"{static_config.PLATFORM_DATABASE_NAME} database. Continue?"
                )
                if not self.confirm(prompt, True):
                    raise YbaCtlError("Stopping yugabundle restore.", phase="restore")
                steps.append(best_effort(f"Stopping {platform.name}", platform.stop, self.logger))
                self._recreate_platform_database()
                dropped_database = True

            try:
                bridge.restore_backup(request)
            except ScriptError as e:
                if dropped_database:
                    raise ScriptError(
                        f"{e} The {static_config.PLATFORM_DATABASE_NAME} database was dropped and "
                        "recreated empty before the failure; fix the cause and rerun restoreBackup "
                        "with --skip_dbdrop.",
                        returncode=e.returncode,
                        output=e.output,
                    ) from e
                raise

            steps.append(
                best_effort(
                    f"Setting permissions on {self.app_settings.data_dir}",
                    platform.set_data_dir_perms,
                    self.logger,
                )
            )

            if request.yugabundle:
                platform.fix_paths = True
                self._service_step(platform, "reconfigure", platform.generate_config)
                try:
                    platform.restart()
                except Exception as e:
                    raise ServiceOperationError(
                        f"Error {e} restarting {platform.name}. The backup was restored but "
                        f"{platform.name} is stopped; start it with 'yba-ctl start' once the cause is fixed.",
                        service_name=platform.name,
                        operation="restart",
                        original_error=e,
                    ) from e

            log_installer(
                f"{self.symbols.get('success', '✅')} Restored backup {request.input_path}",
                "info",
                self.logger,
                self.app_settings,
            )
            return steps

    # --- Service commands ---

    def start(self) -> None:
        with self._lock():
            self._require_installed_copy("start")
            for service in self.registry.services():
                self._service_step(service, "start", service.start)

    def stop(self) -> None:
        with self._lock():
            self._require_installed_copy("stop")
            for service in self.registry.reversed_services():
                self._service_step(service, "stop", service.stop)

    def restart(self) -> None:
        with self._lock():
            self._require_installed_copy("restart")
            for service in self.registry.services():
                self._service_step(service, "restart", service.restart)

    def status(self) -> List[ServiceStatus]:
        """Statuses of all services, healthy or not."""
        statuses = [self._status_of(service) for service in self.registry.services()]
        self._report(statuses)
        return statuses

    # --- Helpers ---

    def _lock(self) -> InstallerLock:
        return InstallerLock(self.app_settings.lock_file)

    def _run_from_installed(self) -> bool:
        return run_from_installed(self.app_settings, self.executable)

    def _require_installed_copy(self, command: str) -> None:
        if not self._run_from_installed():
            raise PreconditionError(
                f"{command} must be run from {self.ctl_installer.wrapper_path}. "
                "It may be in the system's $PATH for ease of use.",
                phase=command,
            )

    def _gate(
        self,
        check_set: PreflightCheckSet,
        skip_preflight: Iterable[str],
        failure_message: str,
    ) -> None:
        results = run_checks(check_set, self.app_settings, skip_preflight, self.logger)
        if should_fail(results):
            log_results(results, self.app_settings, self.logger)
            raise PreflightError(failure_message, results)
        self.logger.debug(f"Preflight checks '{check_set.name}' passed.")

    def _check_upgrade_version(self, state: InstallerState) -> None:
        installed_version = state.version or self._installed_version_from_metadata()
        if not installed_version:
            raise PreconditionError(
                "Cannot upgrade: no installed version found. Is YugabyteDB Anywhere installed?",
                phase="upgrade",
            )
        if not less_versions(installed_version, self.target_version):
            raise PreconditionError(
                f"upgrade target version '{self.target_version}' must be greater than the "
                f"installed YugabyteDB Anywhere version '{installed_version}'",
                phase="upgrade",
            )

    def _installed_version_from_metadata(self) -> str:
        """Version of the installed yba-ctl copy, for installs without a state file."""
        metadata_file = self.ctl_installer.installed_bundle_dir / static_config.VERSION_METADATA_FILE.name
        if not metadata_file.exists():
            return ""
        try:
            return read_version_metadata(metadata_file)
        except VersionError as e:
            raise PreconditionError(f"Cannot upgrade: {e}", phase="upgrade") from e

    def _log_installed_version(self) -> None:
        state = load_state(self.app_settings.state_file, self.logger)
        if state.is_installed:
            self.logger.info(f"Installed YugabyteDB Anywhere version: {state.version}")
        else:
            self.logger.debug("No installed version recorded in state.")

    def _describe_install(self, state: InstallerState) -> None:
        state.install_root = str(self.app_settings.install_root)
        state.postgres_use_existing = self.app_settings.postgres.use_existing.enabled
        state.metadata["services"] = self.registry.order()

    def _service_step(self, service: BaseService, operation: str, func: Callable[[], None]) -> None:
        log_installer(
            f"{self.symbols.get('step', '➡️')} About to {operation} component {service.name}",
            "info",
            self.logger,
            self.app_settings,
        )
        try:
            func()
        except ServiceOperationError:
            raise
        except Exception as e:
            raise ServiceOperationError(
                f"{operation} of {service.name} failed: {e}",
                service_name=service.name,
                operation=operation,
                original_error=e,
            ) from e
        log_installer(
            f"{self.symbols.get('success', '✅')} Completed {operation} of component {service.name}",
            "info",
            self.logger,
            self.app_settings,
        )

    def _status_of(self, service: BaseService) -> ServiceStatus:
        try:
            return service.status()
        except ServiceOperationError:
            raise
        except Exception as e:
            raise ServiceOperationError(
                f"Failed to get status of {service.name}: {e}",
                service_name=service.name,
                operation="status",
                original_error=e,
            ) from e

    def _verify_statuses(self, unhappy_message: str) -> List[ServiceStatus]:
        statuses: List[ServiceStatus] = []
        for service in self.registry.services():
            status = self._status_of(service)
            statuses.append(status)
            if not is_happy_status(status):
                self._report(statuses)
                raise ServiceOperationError(
                    f"{status.service} {unhappy_message} (status: {status.status.value})",
                    service_name=status.service,
                    operation="status",
                )
        return statuses

    def _install_ctl(self) -> None:
        try:
            self.ctl_installer.install()
        except OSError as e:
            raise ServiceOperationError(
                f"failed to install yba-ctl: {e}",
                service_name=static_config.YBACTL_BINARY_NAME,
                operation="install",
                original_error=e,
            ) from e

    def _wait_for_platform(self) -> None:
        try:
            platform = self.registry.get_typed(static_config.PLATFORM_SERVICE_NAME, PlatformService)
        except ServiceLookupError:
            self.logger.debug("No yb-platform service to wait for.")
            return
        if not platform.wait_for_ready(self.app_settings.wait_for_ready_timeout):
            self.logger.warning(
                f"yb-platform did not answer within {self.app_settings.wait_for_ready_timeout}s."
            )

    def _backup_bridge(self) -> BackupScriptBridge:
        platform = self.registry.get_typed(static_config.PLATFORM_SERVICE_NAME, PlatformService)
        return BackupScriptBridge(self.app_settings, platform, self.logger)

    def _recreate_platform_database(self) -> None:
        connection = resolve_postgres_connection(self.app_settings)
        recreate_database(
            connection.db_params("postgres"),
            static_config.PLATFORM_DATABASE_NAME,
            current_logger=self.logger,
        )

    def _report(self, statuses: List[ServiceStatus]) -> None:
        self.logger.info("\n" + cli_handler.format_status_table(statuses, self.app_settings))

    def _terminal_confirm(self, prompt: str, default_yes: bool) -> bool:
        return cli_handler.user_confirm(prompt, default_yes, self.app_settings, self.logger)
