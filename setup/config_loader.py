# setup/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for yba-ctl.

Handles loading settings from Pydantic model defaults, the YAML configuration
file, environment variables, and command-line arguments, applying a specific
order of precedence:
1. Pydantic Model Defaults
2. Environment Variables (YBA_ prefix, "__" for nested fields)
3. YAML Configuration File
4. Command-Line Arguments
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from common.exceptions import ConfigurationError

from . import config as static_config
from .config_models import AppSettings

module_logger = logging.getLogger(__name__)


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively updates a dictionary `source` with values from another dictionary
    `overrides`. Nested dictionaries are merged key by key; any other value in
    `overrides` replaces the one in `source`, except None, which never
    overwrites an existing key.

    Parameters:
        source: Dict[str, Any]
            The dictionary to be updated. This dictionary gets modified in place.
        overrides: Dict[str, Any]
            The dictionary containing values to update or add to the `source`.

    Returns:
        Dict[str, Any]:
            The updated dictionary after applying all `overrides` to the input `source`.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def read_config_file(
    config_file_path: Union[str, Path],
    current_logger: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Reads the YAML configuration file.

    A missing file is not an error: an empty dictionary is returned and the
    defaults apply.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML, or
            does not hold a mapping at the top level.
    """
    logger_to_use = current_logger if current_logger else module_logger
    path = Path(config_file_path)

    if not path.is_file():
        logger_to_use.info(
            f"Configuration file '{path}' not found. Using defaults, environment variables, and CLI args."
        )
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse YAML config file '{path}': {e}", phase="config") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read config file '{path}': {e}", phase="config") from e

    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        raise ConfigurationError(
            f"Config file '{path}' does not contain a YAML mapping.", phase="config"
        )
    logger_to_use.debug(f"Loaded configuration from {path}")
    return yaml_data


def _cli_overrides(cli_args: argparse.Namespace) -> Dict[str, Any]:
    """Maps the global CLI flags onto settings fields."""
    cli_arg_dict = vars(cli_args)
    mapped_cli_values: Dict[str, Any] = {}

    for cli_key, cli_value in cli_arg_dict.items():
        if cli_value is None:
            continue
        if cli_key == "log_level":
            mapped_cli_values["log_level"] = str(cli_value).upper()
        elif cli_key == "yes" and cli_value:
            mapped_cli_values["assume_yes"] = True

    return mapped_cli_values


def load_app_settings(
    cli_args: Optional[argparse.Namespace] = None,
    config_file_path: Union[str, Path] = static_config.CONFIG_FILE_DEFAULT,
    current_logger: Optional[logging.Logger] = None,
) -> AppSettings:
    """
    Loads application settings with the precedence described in the module
    docstring.

    Args:
        cli_args: Parsed command-line arguments (from argparse).
        config_file_path: Path to the YAML configuration file.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        An instance of AppSettings with the fully resolved configuration.

    Raises:
        ConfigurationError: If the file is unreadable or the merged values fail validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    # Environment variables are read by BaseSettings itself and sit below
    # these init values; nested sections are merged key by key.
    current_values_dict = read_config_file(config_file_path, logger_to_use)
    if cli_args:
        current_values_dict = _deep_update(current_values_dict, _cli_overrides(cli_args))

    try:
        final_settings = AppSettings(**current_values_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}", phase="config") from e

    logger_to_use.debug("Successfully loaded and validated application settings")
    return final_settings
