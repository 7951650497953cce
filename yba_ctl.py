#!/usr/bin/env python3
# filename: yba_ctl.py
# -*- coding: utf-8 -*-
"""
Entry point for yba-ctl.
"""

import argparse
import logging
import sys
from typing import List, Optional

from common.exceptions import YbaCtlError
from common.logging_config import setup_logging
from common.version_utils import read_version_metadata
from setup import config as static_config
from setup.config_loader import load_app_settings
from setup.config_models import AppSettings
from ybactl.backup import BackupRequest, RestoreRequest
from ybactl.orchestrator import LifecycleOrchestrator
from ybactl.registry import ServiceRegistry
from ybactl.state_manager import load_state


def _add_skip_preflight(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-s",
        "--skip_preflight",
        action="append",
        default=[],
        metavar="CHECK[,CHECK...]",
        help="Preflight checks to skip (comma-separated, repeatable)",
    )


def _add_common_script_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--skip_restart",
        action="store_true",
        help="Don't restart processes during execution",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Verbose output from the script"
    )


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog=static_config.YBACTL_BINARY_NAME,
        description="Install, upgrade, back up and restore YugabyteDB Anywhere",
    )
    parser.add_argument(
        "--config",
        default=static_config.CONFIG_FILE_DEFAULT,
        help=f"YAML configuration file (default: {static_config.CONFIG_FILE_DEFAULT})",
    )
    parser.add_argument(
        "--log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Console log level",
    )
    parser.add_argument(
        "-y", "--yes", action="store_true", help="Answer yes to every prompt"
    )
    subparsers = parser.add_subparsers(
        dest="command", help="Command to execute", required=True
    )

    install_parser = subparsers.add_parser(
        "install", help="Install YugabyteDB Anywhere and its services"
    )
    _add_skip_preflight(install_parser)
    install_parser.add_argument(
        "-l", "--license-path", dest="license_path", help="Path to the license file"
    )

    upgrade_parser = subparsers.add_parser(
        "upgrade", help="Upgrade an existing installation to this bundle's version"
    )
    _add_skip_preflight(upgrade_parser)
    upgrade_parser.add_argument(
        "--skip_version_checks",
        action="store_true",
        help="Upgrade even if the target version is not newer (not recommended)",
    )

    backup_parser = subparsers.add_parser(
        "createBackup", help="Create a backup of the installation"
    )
    backup_parser.add_argument("output_path", help="Directory to write the backup to")
    _add_skip_preflight(backup_parser)
    backup_parser.add_argument(
        "--data_dir", help="Data directory to back up (default: install root)"
    )
    backup_parser.add_argument(
        "--exclude_prometheus",
        "--exclude-prometheus",
        dest="exclude_prometheus",
        action="store_true",
        help="Exclude prometheus metrics from the backup",
    )
    _add_common_script_flags(backup_parser)

    restore_parser = subparsers.add_parser(
        "restoreBackup", help="Restore a backup into the installation"
    )
    restore_parser.add_argument("input_path", help="Backup archive to restore")
    _add_skip_preflight(restore_parser)
    restore_parser.add_argument(
        "--destination", help="Restore destination (default: install root)"
    )
    restore_parser.add_argument(
        "--yugabundle",
        action="store_true",
        help="The backup was taken from a yugabundle (Replicated) installation",
    )
    restore_parser.add_argument(
        "--use_system_pg",
        action="store_true",
        help="Use the system pg_restore instead of the bundled one",
    )
    restore_parser.add_argument(
        "--skip_dbdrop",
        action="store_true",
        help="Don't drop and recreate the yugaware database (yugabundle only)",
    )
    _add_common_script_flags(restore_parser)

    subparsers.add_parser("start", help="Start all services")
    subparsers.add_parser("stop", help="Stop all services")
    subparsers.add_parser("restart", help="Restart all services")
    subparsers.add_parser("status", help="Show the status of all services")
    subparsers.add_parser("version", help="Show bundle and installed versions")

    return parser.parse_args(args)


def split_skip_list(values: Optional[List[str]]) -> List[str]:
    """Flattens repeated, comma-separated --skip_preflight values."""
    names: List[str] = []
    for value in values or []:
        names.extend(name.strip() for name in value.split(",") if name.strip())
    return names


def run_command_line(
    parsed_args: argparse.Namespace,
    app_settings: AppSettings,
    logger: logging.Logger,
) -> None:
    """Dispatches one parsed command. Errors propagate to main()."""
    bundle_version = read_version_metadata(static_config.VERSION_METADATA_FILE)
    command = parsed_args.command

    if command == "version":
        state = load_state(app_settings.state_file, logger)
        logger.info(f"yba-ctl version: {bundle_version}")
        logger.info(f"Installed version: {state.version or 'not installed'}")
        return

    registry = ServiceRegistry.from_settings(app_settings, bundle_version, logger=logger)
    orchestrator = LifecycleOrchestrator(app_settings, registry, bundle_version, logger=logger)
    skip = split_skip_list(getattr(parsed_args, "skip_preflight", None))

    if command == "install":
        orchestrator.install(skip, parsed_args.license_path)
    elif command == "upgrade":
        orchestrator.upgrade(skip, parsed_args.skip_version_checks)
    elif command == "createBackup":
        request = BackupRequest(
            output_path=parsed_args.output_path,
            data_dir=parsed_args.data_dir or str(app_settings.install_root),
            exclude_prometheus=parsed_args.exclude_prometheus,
            skip_restart=parsed_args.skip_restart,
            verbose=parsed_args.verbose,
        )
        orchestrator.create_backup(request, skip)
    elif command == "restoreBackup":
        request = RestoreRequest(
            input_path=parsed_args.input_path,
            destination=parsed_args.destination or str(app_settings.install_root),
            skip_restart=parsed_args.skip_restart,
            verbose=parsed_args.verbose,
            yugabundle=parsed_args.yugabundle,
            use_system_pg=parsed_args.use_system_pg,
            skip_dbdrop=parsed_args.skip_dbdrop,
        )
        orchestrator.restore_backup(request, skip)
    elif command == "start":
        orchestrator.start()
    elif command == "stop":
        orchestrator.stop()
    elif command == "restart":
        orchestrator.restart()
    elif command == "status":
        orchestrator.status()


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for yba-ctl."""
    parsed_args = parse_args(args)
    logger = setup_logging(log_level=parsed_args.log_level)

    try:
        app_settings = load_app_settings(parsed_args, parsed_args.config, logger)
        logger = setup_logging(
            log_level=app_settings.log_level,
            log_file_path=app_settings.log_file,
        )
        run_command_line(parsed_args, app_settings, logger)
    except YbaCtlError as e:
        logger.critical(str(e))
        return 1
    except OSError as e:
        logger.critical(f"System error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.critical("Interrupted by user.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
