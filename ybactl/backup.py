"""
Bridge to the external backup/restore script (yb_platform_backup.sh).

This module turns a BackupRequest or RestoreRequest plus the configuration
into the script's argument vector, writes the credential scratch file when
the script needs a password, and runs the script. The script's exit status
is the only success signal; failures are never retried.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from common.command_utils import get_symbols, log_installer, run_command
from common.exceptions import ConfigurationError, ScriptError
from common.file_utils import make_executable
from common.pgpass_utils import write_pgpass_file
from common.system_utils import get_current_user, has_sudo_access
from setup import config as static_config
from setup.config_models import AppSettings
from ybactl.services.platform import PlatformService
from ybactl.services.postgres import resolve_postgres_connection

module_logger = logging.getLogger(__name__)


class BackupRequest(BaseModel):
    output_path: str
    data_dir: str
    exclude_prometheus: bool = False
    skip_restart: bool = False
    verbose: bool = False


class RestoreRequest(BaseModel):
    input_path: str
    destination: str
    skip_restart: bool = False
    verbose: bool = False
    yugabundle: bool = False
    use_system_pg: bool = False
    skip_dbdrop: bool = False


class BackupScriptBridge:
    """Builds and runs backup script invocations for one installation."""

    def __init__(
        self,
        app_settings: AppSettings,
        platform: PlatformService,
        logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.platform = platform
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.symbols = get_symbols(app_settings)

    @property
    def script_path(self) -> Path:
        return self.platform.backup_script()

    # --- Argument construction ---

    def build_create_backup_args(self, request: BackupRequest) -> List[str]:
        """
        Argument vector for `create`. Writes the credential file when an
        existing postgres is used.

        Raises:
            ConfigurationError: If an existing postgres is used without a pg_dump path.
        """
        args = [
            "create",
            "--output", request.output_path,
            "--data_dir", request.data_dir,
            "--yba_installer",
        ]
        if request.exclude_prometheus:
            args.append("--exclude-prometheus")
        if request.skip_restart:
            args.append("--skip_restart")
        if request.verbose:
            args.append("--verbose")

        existing = self.app_settings.postgres.use_existing
        if existing.enabled:
            if not existing.pg_dump_path:
                raise ConfigurationError(
                    "pg_dump path must be set (postgres.use_existing.pg_dump_path). Stopping backup process",
                    phase="backup",
                )
            args += ["--pg_dump_path", existing.pg_dump_path]
            args += ["--pgpass_path", str(self.write_credentials())]
        else:
            args += ["--pg_dump_path", str(self.platform.pg_bin / "pg_dump")]

        return args + self.postgres_args()

    def build_restore_args(self, request: RestoreRequest) -> List[str]:
        """
        Argument vector for `restore`. Writes the credential file when an
        existing postgres with a password is used.

        Raises:
            ConfigurationError: If an existing postgres is used without a pg_restore path.
        """
        user_name = self.app_settings.service_username
        args = [
            "restore",
            "--input", request.input_path,
            "--destination", request.destination,
            "--data_dir", request.destination,
            "--disable_version_check",
            "--yba_installer",
            "--yba_user", user_name,
            "--ybai_data_dir", str(self.platform.data_dir),
        ]
        if request.skip_restart:
            args.append("--skip_restart")
        if request.yugabundle:
            args.append("--yugabundle")
        if request.use_system_pg:
            args.append("--use_system_pg")
        if request.verbose:
            args.append("--verbose")
        # Owner of the restored prometheus data.
        args += ["-e", user_name if has_sudo_access() else get_current_user()]

        self.check_restore_config()
        existing = self.app_settings.postgres.use_existing
        if existing.enabled:
            args += ["--pg_restore_path", existing.pg_restore_path]
            if existing.password:
                args += ["--pgpass_path", str(self.write_credentials())]
        else:
            args += ["--pg_restore_path", str(self.platform.pg_bin / "pg_restore")]

        return args + self.postgres_args()

    def check_restore_config(self) -> None:
        """
        Raises:
            ConfigurationError: If an existing postgres is used without a pg_restore path.
        """
        existing = self.app_settings.postgres.use_existing
        if existing.enabled and not existing.pg_restore_path:
            raise ConfigurationError(
                "pg_restore path must be set (postgres.use_existing.pg_restore_path). Stopping restore process.",
                phase="restore",
            )

    def postgres_args(self) -> List[str]:
        connection = resolve_postgres_connection(self.app_settings)
        return [
            "--db_username", connection.username,
            "--db_host", connection.host,
            "--db_port", str(connection.port),
        ]

    def write_credentials(self) -> Path:
        """(Re)writes the credential scratch file for the existing postgres."""
        existing = self.app_settings.postgres.use_existing
        try:
            return write_pgpass_file(
                self.app_settings.pgpass_path,
                existing.host,
                existing.port,
                static_config.PLATFORM_DATABASE_NAME,
                existing.username,
                existing.password,
                app_settings=self.app_settings,
                current_logger=self.logger,
            )
        except OSError as e:
            raise ConfigurationError(f"could not create pgpass file: {e}", phase="credentials") from e

    # --- Invocation ---

    def create_backup(self, request: BackupRequest) -> None:
        """
        Raises:
            ConfigurationError: See build_create_backup_args.
            ScriptError: If the script fails.
        """
        args = self.build_create_backup_args(request)
        log_installer(
            f"{self.symbols.get('package', '📦')} Creating a backup of your YugabyteDB Anywhere installation.",
            "info",
            self.logger,
            self.app_settings,
        )
        self._run_script(args, "Backup script failed.")

    def restore_backup(self, request: RestoreRequest) -> None:
        """
        Raises:
            ConfigurationError: See build_restore_args.
            ScriptError: If the script fails.
        """
        args = self.build_restore_args(request)
        log_installer(
            f"{self.symbols.get('package', '📦')} Restoring a backup of your YugabyteDB Anywhere installation.",
            "info",
            self.logger,
            self.app_settings,
        )
        self._run_script(args, "Restore script failed. May need to restart services.")

    def _run_script(self, args: List[str], failure_message: str) -> None:
        script = self.script_path
        try:
            make_executable(script)
        except OSError as e:
            raise ScriptError(f"cannot make {script} executable: {e}") from e
        self.logger.debug(f"{script} has been given executable permissions.")

        try:
            result = run_command(
                [str(script)] + args,
                self.app_settings,
                check=False,
                capture_output=True,
                current_logger=self.logger,
                timeout=self.app_settings.backup_script_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ScriptError(
                f"{failure_message} {script} did not finish within {e.timeout}s."
            ) from e
        except OSError as e:
            raise ScriptError(f"{failure_message} Could not run {script}: {e}") from e

        output = "\n".join(s.strip() for s in (result.stdout, result.stderr) if s and s.strip())
        if result.returncode != 0:
            raise ScriptError(
                f"{failure_message} {script.name} exited with {result.returncode}: {output}",
                returncode=result.returncode,
                output=output,
            )
