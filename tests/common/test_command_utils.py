import logging
import subprocess
from unittest.mock import MagicMock

import pytest

from common.command_utils import (
    get_symbols,
    log_installer,
    run_command,
    run_elevated_command,
)
from setup.config_models import SYMBOLS_DEFAULT


@pytest.fixture
def mock_logger():
    """Fixture to create a mock logger for testing."""
    return MagicMock(spec=logging.Logger)


def test_log_installer_success_logs_at_info(mock_logger):
    log_installer("done", "success", mock_logger)
    mock_logger.info.assert_called_once_with("done", exc_info=False)


def test_log_installer_warning(mock_logger):
    log_installer("careful", "warning", mock_logger)
    mock_logger.warning.assert_called_once_with("careful", exc_info=False)


def test_get_symbols_falls_back_to_defaults():
    assert get_symbols(None) == SYMBOLS_DEFAULT


def test_run_command_success(mocker, app_settings, mock_logger):
    mock_run = mocker.patch(
        "subprocess.run",
        return_value=subprocess.CompletedProcess(["echo", "hi"], 0, stdout="hi\n", stderr=""),
    )

    result = run_command(["echo", "hi"], app_settings, capture_output=True, current_logger=mock_logger)

    assert result.stdout == "hi\n"
    mock_run.assert_called_once_with(
        ["echo", "hi"],
        check=True,
        capture_output=True,
        text=True,
        input=None,
        cwd=None,
        env=None,
        timeout=None,
    )


def test_run_command_reraises_called_process_error(mocker, app_settings, mock_logger):
    mocker.patch(
        "subprocess.run",
        side_effect=subprocess.CalledProcessError(3, ["false"], output="", stderr="boom"),
    )

    with pytest.raises(subprocess.CalledProcessError):
        run_command(["false"], app_settings, current_logger=mock_logger)
    assert mock_logger.error.call_count == 2


def test_run_command_timeout(mocker, app_settings, mock_logger):
    mocker.patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["sleep"], 5))

    with pytest.raises(subprocess.TimeoutExpired):
        run_command(["sleep", "10"], app_settings, current_logger=mock_logger, timeout=5)


def test_run_command_not_found(mocker, app_settings, mock_logger):
    mocker.patch("subprocess.run", side_effect=FileNotFoundError(2, "No such file", "nope"))

    with pytest.raises(FileNotFoundError):
        run_command(["nope"], app_settings, current_logger=mock_logger)


@pytest.mark.parametrize("euid, expected", [(0, ["systemctl", "start", "x"]), (1000, ["sudo", "systemctl", "start", "x"])])
def test_run_elevated_command_prefix(mocker, app_settings, euid, expected):
    mocker.patch("os.geteuid", return_value=euid)
    mock_run_command = mocker.patch("common.command_utils.run_command")

    run_elevated_command(["systemctl", "start", "x"], app_settings)

    assert mock_run_command.call_args.args[0] == expected
