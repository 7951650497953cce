# setup/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for yba-ctl configuration.

This module defines the structured settings for the installer, including
defaults, type annotations, and descriptions. Paths that are derived from the
configured roots are exposed as read-only properties so that every component
resolves them the same way.
"""

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from setup import config as static_config

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅", "error": "❌", "warning": "⚠️", "info": "ℹ️",
    "step": "➡️", "gear": "⚙️", "package": "📦", "rocket": "🚀",
    "sparkles": "✨", "critical": "🔥", "debug": "🐛",
}

PLATFORM_PORT_DEFAULT: int = 443
PROMETHEUS_PORT_DEFAULT: int = 9090
PGPORT_DEFAULT: int = 5432

PLATFORM_CONF_TEMPLATE_DEFAULT: str = """\
# platform.conf generated by yba-ctl {version}
include classpath("application.common.conf")

play.http.secret.key = "{app_secret}"
http.port = disabled
https.port = {port}

yb {{
  storage.path = "{data_dir}"
  releases.path = "{release_dir}"
  fixPaths = {fix_paths}
  metrics.url = "http://127.0.0.1:{prometheus_port}/api/v1"
}}

db.default.url = "jdbc:postgresql://{db_host}:{db_port}/yugaware"
db.default.username = "{db_username}"
db.default.password = "{db_password}"
"""

PROMETHEUS_CONF_TEMPLATE_DEFAULT: str = """\
# prometheus.yml generated by yba-ctl {version}
global:
  scrape_interval: {scrape_interval}
  evaluation_interval: {scrape_interval}
  external_labels:
    monitor: 'swamper'
rule_files:
  - '{swamper_rules_dir}/yugaware.ad.*.yml'
scrape_configs:
  - job_name: 'prometheus'
    static_configs:
      - targets: ['127.0.0.1:{port}']
  - job_name: 'platform'
    metrics_path: '/api/v1/prometheus_metrics'
    scheme: https
    tls_config:
      insecure_skip_verify: true
    static_configs:
      - targets: ['127.0.0.1:{platform_port}']
"""

POSTGRESQL_CONF_ADDITIONS_TEMPLATE_DEFAULT: str = """\
# --- YBA-CTL CUSTOMISATIONS {version} ---
port = {port}
listen_addresses = 'localhost'
unix_socket_directories = '{run_dir}'
log_directory = '{log_dir}'
# --- END YBA-CTL CUSTOMISATIONS ---
"""


class PostgresInstallSettings(BaseModel):
    """Settings for the postgres instance installed and managed by yba-ctl."""

    enabled: bool = Field(default=True, description="Install and manage a local postgres.")
    port: int = Field(default=PGPORT_DEFAULT, description="Port of the managed postgres.")
    username: str = Field(default="postgres", description="Superuser of the managed postgres.")
    conf_additions_template: str = Field(
        default=POSTGRESQL_CONF_ADDITIONS_TEMPLATE_DEFAULT,
        description="Template appended to postgresql.conf. Supports {version}, {port}, {run_dir}, {log_dir}.",
    )


class PostgresUseExistingSettings(BaseModel):
    """Settings for an externally managed postgres."""

    enabled: bool = Field(default=False, description="Use an existing, externally managed postgres.")
    host: str = Field(default="localhost", description="Host of the existing postgres.")
    port: int = Field(default=PGPORT_DEFAULT, description="Port of the existing postgres.")
    username: str = Field(default="", description="User yb-platform connects as.")
    password: str = Field(default="", description="Password of that user.", exclude=True)
    pg_dump_path: str = Field(default="", description="pg_dump binary used for backups.")
    pg_restore_path: str = Field(default="", description="pg_restore binary used for restores.")


class PostgresSettings(BaseModel):
    """Postgres settings: exactly one of 'install' or 'use_existing' is enabled."""

    install: PostgresInstallSettings = Field(default_factory=PostgresInstallSettings)
    use_existing: PostgresUseExistingSettings = Field(default_factory=PostgresUseExistingSettings)

    @model_validator(mode="after")
    def _exactly_one_mode(self) -> "PostgresSettings":
        if self.install.enabled == self.use_existing.enabled:
            raise ValueError(
                "exactly one of postgres.install.enabled and postgres.use_existing.enabled must be true"
            )
        return self


class PlatformSettings(BaseModel):
    """yb-platform (web service) settings."""

    port: int = Field(default=PLATFORM_PORT_DEFAULT, description="HTTPS port of yb-platform.")
    hostname: str = Field(default="localhost", description="Host used for readiness checks.")
    app_secret: str = Field(default="changeme", description="Play application secret.", exclude=True)
    fix_paths: bool = Field(default=False, description="Rewrite stored paths on next start (after yugabundle restore).")
    conf_template: str = Field(default=PLATFORM_CONF_TEMPLATE_DEFAULT, description="Template for platform.conf.")


class PrometheusSettings(BaseModel):
    """Prometheus (metrics collector) settings."""

    port: int = Field(default=PROMETHEUS_PORT_DEFAULT, description="Port of prometheus.")
    scrape_interval: str = Field(default="10s", description="Global scrape interval.")
    retention_time: str = Field(default="15d", description="TSDB retention.")
    conf_template: str = Field(default=PROMETHEUS_CONF_TEMPLATE_DEFAULT, description="Template for prometheus.yml.")


class PreflightSettings(BaseModel):
    """Thresholds used by the preflight checks."""

    min_disk_gb: int = Field(default=50, description="Free disk required under the install root.")
    min_cpus: int = Field(default=4, description="CPU cores required.")
    min_memory_gb: int = Field(default=15, description="Memory required.")
    min_python: str = Field(default="3.8", description="Lowest supported Python interpreter.")
    skip: List[str] = Field(default_factory=list, description="Checks always skipped on this host.")


class AppSettings(BaseSettings):
    """Main yba-ctl settings."""

    model_config = SettingsConfigDict(
        env_prefix="YBA_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    install_root: Path = Field(default=Path(static_config.INSTALL_ROOT_DEFAULT),
                               description="Root directory for software and data.")
    ybactl_root: Path = Field(default=Path(static_config.YBACTL_ROOT_DEFAULT),
                              description="Directory holding the installed yba-ctl, its state and logs.")
    service_username: str = Field(default=static_config.SERVICE_USERNAME_DEFAULT,
                                  description="OS user the services run as.")
    log_level: str = Field(default="INFO", description="Console log level.")
    assume_yes: bool = Field(default=False, description="Answer yes to every confirmation prompt.")
    wait_for_ready_timeout: int = Field(default=300, description="Seconds to wait for yb-platform after install.")
    backup_script_timeout: Optional[int] = Field(
        default=None, description="Seconds before the backup script is killed. Unset means wait forever.")

    platform: PlatformSettings = Field(default_factory=PlatformSettings)
    prometheus: PrometheusSettings = Field(default_factory=PrometheusSettings)
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    preflight: PreflightSettings = Field(default_factory=PreflightSettings)

    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))

    @property
    def software_dir(self) -> Path:
        return self.install_root / static_config.SOFTWARE_DIR_NAME

    @property
    def active_software_dir(self) -> Path:
        return self.software_dir / static_config.ACTIVE_SYMLINK_NAME

    @property
    def data_dir(self) -> Path:
        return self.install_root / static_config.DATA_DIR_NAME

    @property
    def state_file(self) -> Path:
        return self.ybactl_root / static_config.STATE_FILE_NAME

    @property
    def installed_marker(self) -> Path:
        return self.ybactl_root / static_config.INSTALLED_MARKER_NAME

    @property
    def install_started_marker(self) -> Path:
        return self.ybactl_root / static_config.INSTALL_STARTED_MARKER_NAME

    @property
    def pgpass_path(self) -> Path:
        return self.ybactl_root / static_config.PGPASS_FILE_NAME

    @property
    def lock_file(self) -> Path:
        return self.ybactl_root / static_config.LOCK_FILE_NAME

    @property
    def log_file(self) -> Path:
        return self.ybactl_root / static_config.LOG_FILE_NAME

    @property
    def license_file(self) -> Path:
        return self.ybactl_root / static_config.LICENSE_FILE_NAME
