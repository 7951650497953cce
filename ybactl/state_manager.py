# ybactl/state_manager.py
# -*- coding: utf-8 -*-
"""
Manages the installer state file.

The state file records which version is installed and which workflow, if
any, was started but not finished. It is read at the start of upgrade,
backup and restore and rewritten at the end of every successful install or
upgrade. Writes go through a temporary file and a rename, so a crash never
leaves a partially written record behind.
"""

import datetime
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from common.command_utils import get_symbols, log_installer
from common.exceptions import StateError
from common.file_utils import atomic_write_text
from setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)

STATE_SCHEMA_VERSION = 1
STATE_FILE_MODE = 0o600


class Workflow(str, Enum):
    """Lifecycle workflow recorded while it is in progress."""

    INSTALL = "install"
    UPGRADE = "upgrade"


class InstallerState(BaseModel):
    """The persisted installer record. The default value means "no prior state"."""

    schema_version: int = STATE_SCHEMA_VERSION
    version: str = ""
    current_workflow: Optional[Workflow] = None
    install_root: str = ""
    postgres_use_existing: bool = False
    updated_at: Optional[datetime.datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_installed(self) -> bool:
        return bool(self.version)


def load_state(
    state_file: Path,
    current_logger: Optional[logging.Logger] = None,
) -> InstallerState:
    """
    Loads the installer state.

    A missing file is not an error: installations predating state tracking
    have none, so an empty InstallerState is returned.

    Raises:
        StateError: If the file exists but cannot be read or parsed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    path = Path(state_file)
    if not path.exists():
        logger_to_use.debug(f"No state file at {path}, starting from empty state.")
        return InstallerState()
    try:
        raw = path.read_text(encoding="utf-8")
        return InstallerState.model_validate(json.loads(raw))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise StateError(f"failed to read state file {path}: {e}", phase="state") from e


def store_state(
    state: InstallerState,
    state_file: Path,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Atomically replaces the state file with `state`.

    Raises:
        StateError: If the file cannot be written.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    state.updated_at = datetime.datetime.now(datetime.timezone.utc)
    try:
        atomic_write_text(
            state_file,
            state.model_dump_json(indent=2) + "\n",
            mode=STATE_FILE_MODE,
        )
    except OSError as e:
        raise StateError(f"failed to write state file {state_file}: {e}", phase="state") from e
    log_installer(
        f"{symbols.get('success', '✅')} State saved to {state_file} "
        f"(version={state.version or 'none'}, workflow={state.current_workflow.value if state.current_workflow else 'none'}).",
        "debug",
        logger_to_use,
        app_settings,
    )
