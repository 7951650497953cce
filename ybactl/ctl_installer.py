"""
Installs yba-ctl itself next to the software it manages.

After a successful install or upgrade the bundle's copy of yba-ctl is copied
under ybactl_root, where backup, restore and the service commands must be run
from, and the install markers are updated.
"""

import logging
import shutil
import sys
from pathlib import Path
from typing import Optional

from common.command_utils import get_symbols, log_installer
from common.file_utils import atomic_write_text
from setup import config as static_config
from setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)

# Source trees and files that make up a runnable yba-ctl.
_CTL_PACKAGES = ("common", "setup", "ybactl")
_CTL_FILES = ("yba_ctl.py", "version_metadata.json")

_WRAPPER_TEMPLATE = """\
#!/bin/sh
exec {python} {entrypoint} "$@"
"""


class YbaCtlInstaller:
    def __init__(
        self,
        app_settings: AppSettings,
        bundle_root: Path = static_config.BUNDLE_ROOT,
        logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.bundle_root = Path(bundle_root)
        self.logger = logger or module_logger
        self.symbols = get_symbols(app_settings)

    @property
    def installed_bundle_dir(self) -> Path:
        return self.app_settings.ybactl_root / "bundle"

    @property
    def wrapper_path(self) -> Path:
        return self.app_settings.ybactl_root / static_config.YBACTL_BINARY_NAME

    def is_installed(self) -> bool:
        return self.app_settings.installed_marker.exists()

    def mark_install_start(self) -> None:
        self.app_settings.ybactl_root.mkdir(parents=True, exist_ok=True)
        self.app_settings.install_started_marker.touch()

    def install_license(self, license_path: Path) -> None:
        """Copies the license into ybactl_root."""
        self.app_settings.ybactl_root.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(license_path, self.app_settings.license_file)
        log_installer(
            f"{self.symbols.get('success', '✅')} Installed license {license_path}",
            "info",
            self.logger,
            self.app_settings,
        )

    def install(self) -> None:
        """
        Copies yba-ctl into ybactl_root, writes the wrapper script and marks the
        installation complete.

        Raises:
            OSError: If copying fails.
        """
        target = self.installed_bundle_dir
        target.mkdir(parents=True, exist_ok=True)
        for package in _CTL_PACKAGES:
            source = self.bundle_root / package
            if source.is_dir():
                shutil.copytree(
                    source,
                    target / package,
                    dirs_exist_ok=True,
                    ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
                )
        for file_name in _CTL_FILES:
            source = self.bundle_root / file_name
            if source.is_file():
                shutil.copy2(source, target / file_name)

        atomic_write_text(
            self.wrapper_path,
            _WRAPPER_TEMPLATE.format(python=sys.executable, entrypoint=target / "yba_ctl.py"),
            mode=0o755,
        )
        self.app_settings.installed_marker.touch()
        if self.app_settings.install_started_marker.exists():
            self.app_settings.install_started_marker.unlink()
        log_installer(
            f"{self.symbols.get('success', '✅')} yba-ctl installed at {self.wrapper_path}",
            "info",
            self.logger,
            self.app_settings,
        )
