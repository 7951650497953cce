"""
yb-platform service: the YugabyteDB Anywhere web application.

Besides the lifecycle contract this service owns what backup and restore
need: the backup script shipped in its package, the postgres client tools,
its data directory and the fixPaths switch set after a yugabundle restore.
"""

import subprocess
import time
from pathlib import Path
from typing import Optional

import requests
import urllib3

from common.file_utils import atomic_write_text, chown_recursive
from setup import config as static_config
from ybactl.base_service import BaseService
from ybactl.layout import stage_package
from ybactl.registry import ServiceRegistry
from ybactl.services.postgres import resolve_postgres_connection


@ServiceRegistry.register(static_config.PLATFORM_SERVICE_NAME)
class PlatformService(BaseService):

    package_prefix = "yugaware"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fix_paths = self.app_settings.platform.fix_paths

    @property
    def port(self) -> Optional[int]:
        return self.app_settings.platform.port

    @property
    def config_path(self) -> Optional[Path]:
        return self.conf_dir / "platform.conf"

    @property
    def pg_bin(self) -> Path:
        """Postgres client tools (pg_dump, pg_restore) shipped with yb-platform."""
        return self.software_dir / "pgsql" / "bin"

    @property
    def release_dir(self) -> Path:
        return self.data_dir / "releases"

    def backup_script(self) -> Path:
        return self.software_dir / static_config.BACKUP_SCRIPT_RELATIVE_PATH

    def install(self) -> None:
        try:
            stage_package(self.app_settings, self.version, self.name, self.package_prefix, self.logger)
            self.release_dir.mkdir(parents=True, exist_ok=True)
            self.generate_config()
        except (OSError, subprocess.SubprocessError) as e:
            raise self._fail("install", e) from e
        self.start()

    def upgrade(self) -> None:
        try:
            stage_package(self.app_settings, self.version, self.name, self.package_prefix, self.logger)
            self.generate_config()
        except (OSError, subprocess.SubprocessError) as e:
            raise self._fail("upgrade", e) from e

    def generate_config(self) -> None:
        """Renders platform.conf and the systemd unit from the current settings."""
        connection = resolve_postgres_connection(self.app_settings)
        settings = self.app_settings.platform
        atomic_write_text(
            self.config_path,
            settings.conf_template.format(
                version=self.version,
                app_secret=settings.app_secret,
                port=settings.port,
                data_dir=self.data_dir,
                release_dir=self.release_dir,
                fix_paths="true" if self.fix_paths else "false",
                prometheus_port=self.app_settings.prometheus.port,
                db_host=connection.host,
                db_port=connection.port,
                db_username=connection.username,
                db_password=connection.password,
            ),
            mode=0o600,
        )
        after = "network.target"
        if not connection.use_existing:
            after += f" {static_config.POSTGRES_SERVICE_NAME}.service"
        exec_start = (
            f"{self.software_dir / 'bin' / 'yugaware'}"
            f" -Dconfig.file={self.config_path}"
            f" -Dpidfile.path=/dev/null"
        )
        self._write_unit(self._render_unit("YugabyteDB Anywhere", exec_start, after=after))

    def set_data_dir_perms(self) -> None:
        """Gives the data directory back to the service user."""
        try:
            chown_recursive(
                self.app_settings.data_dir,
                self.app_settings.service_username,
                self.app_settings,
                current_logger=self.logger,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise self._fail("set permissions", e) from e

    def wait_for_ready(self, timeout: int, interval: float = 5.0) -> bool:
        """
        Polls the app_version endpoint until it answers or `timeout` seconds pass.

        Returns:
            True if yb-platform answered in time.
        """
        settings = self.app_settings.platform
        url = f"https://{settings.hostname}:{settings.port}/api/v1/app_version"
        # yb-platform serves a self-signed certificate right after install.
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        deadline = time.monotonic() + timeout
        self.logger.info(f"Waiting up to {timeout}s for yb-platform at {url}")
        while True:
            try:
                response = requests.get(url, verify=False, timeout=5)
                if response.status_code == 200:
                    self.logger.info("yb-platform is ready.")
                    return True
                self.logger.debug(f"yb-platform answered {response.status_code}")
            except requests.RequestException as e:
                self.logger.debug(f"yb-platform not ready yet: {e}")
            if time.monotonic() >= deadline:
                return False
            time.sleep(interval)
