"""
Postgres service: the database backing yb-platform when yba-ctl manages it.
"""

import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel

from setup import config as static_config
from setup.config_models import AppSettings
from ybactl.base_service import BaseService
from ybactl.layout import stage_package
from ybactl.registry import ServiceRegistry


class PostgresConnection(BaseModel):
    """How yb-platform, the backup script and yba-ctl itself reach postgres."""

    host: str
    port: int
    username: str
    password: str = ""
    use_existing: bool = False

    def db_params(self, dbname: str) -> Dict[str, Any]:
        return {
            "dbname": dbname,
            "user": self.username,
            "password": self.password or None,
            "host": self.host,
            "port": self.port,
        }


def resolve_postgres_connection(app_settings: AppSettings) -> PostgresConnection:
    """Connection parameters for the configured postgres mode."""
    pg = app_settings.postgres
    if pg.use_existing.enabled:
        return PostgresConnection(
            host=pg.use_existing.host,
            port=pg.use_existing.port,
            username=pg.use_existing.username,
            password=pg.use_existing.password,
            use_existing=True,
        )
    return PostgresConnection(
        host="localhost",
        port=pg.install.port,
        username=pg.install.username,
    )


@ServiceRegistry.register(static_config.POSTGRES_SERVICE_NAME)
class PostgresService(BaseService):
    """Postgres installed from the bundle and run under systemd."""

    package_prefix = "postgresql"

    @property
    def port(self) -> Optional[int]:
        return self.app_settings.postgres.install.port

    @property
    def pg_bin(self) -> Path:
        return self.software_dir / "bin"

    @property
    def pg_data(self) -> Path:
        return self.data_dir / "data"

    @property
    def run_dir(self) -> Path:
        return self.data_dir / "run"

    @property
    def config_path(self) -> Optional[Path]:
        return self.pg_data / "postgresql.conf"

    def install(self) -> None:
        try:
            stage_package(
                self.app_settings, self.version, self.name, self.package_prefix, self.logger
            )
            for directory in (self.data_dir, self.run_dir, self.data_dir / "logs"):
                directory.mkdir(parents=True, exist_ok=True)
            if not (self.pg_data / "PG_VERSION").exists():
                self.logger.info(f"Initializing postgres data directory {self.pg_data}")
                self._run_as_service_user(
                    [
                        str(self.pg_bin / "initdb"),
                        "-D", str(self.pg_data),
                        "-U", self.app_settings.postgres.install.username,
                    ]
                )
            self._write_config()
            self._write_unit(self._unit())
        except (OSError, subprocess.SubprocessError) as e:
            raise self._fail("install", e) from e
        self.start()

    def upgrade(self) -> None:
        # Minor version upgrade only: the data directory is reused as is.
        try:
            stage_package(
                self.app_settings, self.version, self.name, self.package_prefix, self.logger
            )
            self._write_config()
            self._write_unit(self._unit())
        except (OSError, subprocess.SubprocessError) as e:
            raise self._fail("upgrade", e) from e

    def _write_config(self) -> None:
        marker = "# --- YBA-CTL CUSTOMISATIONS"
        additions = self.app_settings.postgres.install.conf_additions_template.format(
            version=self.version,
            port=self.port,
            run_dir=self.run_dir,
            log_dir=self.data_dir / "logs",
        )
        existing = self.config_path.read_text(encoding="utf-8") if self.config_path.exists() else ""
        # Drop the block written by a previous run before appending the new one.
        if marker in existing:
            existing = existing[: existing.index(marker)].rstrip("\n") + "\n"
        self.config_path.write_text(existing + additions, encoding="utf-8")

    def _unit(self) -> str:
        return self._render_unit(
            "Postgres for YugabyteDB Anywhere",
            f"{self.pg_bin / 'postgres'} -D {self.pg_data}",
        )
