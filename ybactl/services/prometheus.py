"""
Prometheus service: collects metrics from yb-platform and the universes it manages.
"""

import subprocess
from pathlib import Path
from typing import Optional

from common.file_utils import atomic_write_text
from setup import config as static_config
from ybactl.base_service import BaseService
from ybactl.layout import stage_package
from ybactl.registry import ServiceRegistry


@ServiceRegistry.register(static_config.PROMETHEUS_SERVICE_NAME)
class PrometheusService(BaseService):

    package_prefix = "prometheus"

    @property
    def port(self) -> Optional[int]:
        return self.app_settings.prometheus.port

    @property
    def config_path(self) -> Optional[Path]:
        return self.conf_dir / "prometheus.yml"

    @property
    def storage_dir(self) -> Path:
        return self.data_dir / "storage"

    @property
    def swamper_rules_dir(self) -> Path:
        return self.data_dir / "swamper_rules"

    def install(self) -> None:
        try:
            self._deploy()
            for directory in (self.storage_dir, self.swamper_rules_dir):
                directory.mkdir(parents=True, exist_ok=True)
        except (OSError, subprocess.SubprocessError) as e:
            raise self._fail("install", e) from e
        self.start()

    def upgrade(self) -> None:
        try:
            self._deploy()
        except (OSError, subprocess.SubprocessError) as e:
            raise self._fail("upgrade", e) from e

    def _deploy(self) -> None:
        stage_package(self.app_settings, self.version, self.name, self.package_prefix, self.logger)
        settings = self.app_settings.prometheus
        atomic_write_text(
            self.config_path,
            settings.conf_template.format(
                version=self.version,
                scrape_interval=settings.scrape_interval,
                swamper_rules_dir=self.swamper_rules_dir,
                port=settings.port,
                platform_port=self.app_settings.platform.port,
            ),
        )
        exec_start = (
            f"{self.software_dir / 'prometheus'}"
            f" --config.file={self.config_path}"
            f" --storage.tsdb.path={self.storage_dir}"
            f" --storage.tsdb.retention.time={settings.retention_time}"
            f" --web.listen-address=:{settings.port}"
            " --web.enable-admin-api --web.enable-lifecycle"
        )
        self._write_unit(self._render_unit("Prometheus for YugabyteDB Anywhere", exec_start))
