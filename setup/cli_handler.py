# setup/cli_handler.py
# -*- coding: utf-8 -*-
"""
Handles Command Line Interface (CLI) interactions for yba-ctl.
"""

import logging
from typing import List, Optional

from common.command_utils import log_installer
from setup.config_models import AppSettings
from ybactl.base_service import ServiceStatus, is_happy_status

module_logger = logging.getLogger(__name__)


def user_confirm(
    prompt_message: str,
    default_yes: bool,
    app_settings: AppSettings,
    current_logger_instance: Optional[logging.Logger] = None,
) -> bool:
    """
    Prompt the user in the CLI to confirm or reject an action. An empty answer
    takes the default; end-of-file (EOF) always means "No".

    Parameters:
    prompt_message : str
        The message to display in the CLI when prompting the user.
    default_yes : bool
        Answer used when the user just presses Enter.
    app_settings : AppSettings
        The application settings; assume_yes skips the prompt.
    current_logger_instance : Optional[logging.Logger]
        The logger instance to use for logging.

    Returns:
    bool
        True if the user confirmed.
    """
    logger_to_use = (
        current_logger_instance if current_logger_instance else module_logger
    )
    symbols = app_settings.symbols
    if app_settings.assume_yes:
        logger_to_use.debug(f"Assuming 'yes' for prompt: '{prompt_message}'")
        return True

    choices = "Y/n" if default_yes else "y/N"
    try:
        user_input = (
            input(f"   {symbols.get('info', 'ℹ️')} {prompt_message} ({choices}): ")
            .strip()
            .lower()
        )
    except EOFError:
        log_installer(
            f"{symbols.get('warning', '!')} No user input (EOF), defaulting to 'N' for prompt: '{prompt_message}'",
            "warning",
            logger_to_use,
            app_settings,
        )
        return False

    if not user_input:
        return default_yes
    return user_input in ("y", "yes")


def format_status_table(
    statuses: List[ServiceStatus], app_settings: AppSettings
) -> str:
    """Renders service statuses as a fixed-width table."""
    symbols = app_settings.symbols
    header = f"{'Service':<14}{'Status':<16}{'Version':<20}{'Port':<8}Config"
    lines = [header, "-" * len(header)]
    for status in statuses:
        marker = symbols.get("success", "+") if is_happy_status(status) else symbols.get("error", "x")
        port = str(status.port) if status.port is not None else "-"
        lines.append(
            f"{status.service:<14}{marker + ' ' + status.status.value:<16}"
            f"{status.version or '-':<20}{port:<8}{status.config_path or '-'}"
        )
        if status.detail:
            lines.append(f"{'':<14}{status.detail}")
    return "\n".join(lines)
