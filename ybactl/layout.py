"""
Directory layout shared by all services of one installation.

Software for each version lives in <install_root>/software/<version>/<service>;
<install_root>/software/active points at the version in use.
"""

import logging
from pathlib import Path
from typing import Optional

from common.command_utils import get_symbols, log_installer
from common.file_utils import chown_recursive, extract_archive, update_symlink
from common.system_utils import has_sudo_access
from setup import config as static_config
from setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def version_software_dir(app_settings: AppSettings, version: str) -> Path:
    return app_settings.software_dir / version


def prepare_install_layout(
    app_settings: AppSettings,
    version: str,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Creates the software and data directories for `version` and points the
    active symlink at it.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    version_dir = version_software_dir(app_settings, version)
    for directory in (version_dir, app_settings.data_dir, app_settings.ybactl_root):
        directory.mkdir(parents=True, exist_ok=True)
    update_symlink(version_dir, app_settings.active_software_dir)
    if has_sudo_access():
        chown_recursive(
            app_settings.install_root,
            app_settings.service_username,
            app_settings,
            current_logger=logger_to_use,
        )
    log_installer(
        f"{symbols.get('success', '✅')} Software directory for {version} is {version_dir}",
        "info",
        logger_to_use,
        app_settings,
    )


def stage_package(
    app_settings: AppSettings,
    version: str,
    service_name: str,
    package_prefix: str,
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Extracts the bundle package `<package_prefix>*.tar.gz` into the software
    directory of `service_name` for `version`. Re-staging an already
    extracted package overwrites it in place.

    Raises:
        FileNotFoundError: If the bundle does not ship the package.
    """
    logger_to_use = current_logger if current_logger else module_logger
    matches = sorted(static_config.PACKAGES_DIR.glob(f"{package_prefix}*.tar.gz"))
    if not matches:
        raise FileNotFoundError(
            f"no {package_prefix}*.tar.gz package in {static_config.PACKAGES_DIR}"
        )
    destination = version_software_dir(app_settings, version) / service_name
    return extract_archive(matches[-1], destination, current_logger=logger_to_use)
