# -*- coding: utf-8 -*-
import logging

import pytest

import yba_ctl
from common.exceptions import PreflightError
from ybactl.backup import BackupRequest, RestoreRequest


@pytest.fixture
def cli_env(mocker, app_settings):
    mocker.patch("yba_ctl.setup_logging", return_value=logging.getLogger("yba-ctl-test"))
    mocker.patch("yba_ctl.load_app_settings", return_value=app_settings)
    mocker.patch("yba_ctl.read_version_metadata", return_value="2.20.1.0-b97")
    mocker.patch("yba_ctl.ServiceRegistry.from_settings")
    orchestrator_cls = mocker.patch("yba_ctl.LifecycleOrchestrator")
    return orchestrator_cls.return_value


def test_split_skip_list():
    assert yba_ctl.split_skip_list(["disk_space,cpu", " memory ", ""]) == ["disk_space", "cpu", "memory"]
    assert yba_ctl.split_skip_list(None) == []


def test_requires_a_command():
    with pytest.raises(SystemExit):
        yba_ctl.parse_args([])


def test_install_with_skips_and_license(cli_env):
    assert yba_ctl.main(["install", "-s", "disk_space,cpu", "-s", "memory", "-l", "/tmp/yba.lic"]) == 0
    cli_env.install.assert_called_once_with(["disk_space", "cpu", "memory"], "/tmp/yba.lic")


def test_upgrade_skip_version_checks(cli_env):
    assert yba_ctl.main(["upgrade", "--skip_version_checks"]) == 0
    cli_env.upgrade.assert_called_once_with([], True)


def test_create_backup_request(cli_env, app_settings):
    assert yba_ctl.main(["createBackup", "/backups", "--exclude-prometheus", "--verbose"]) == 0
    cli_env.create_backup.assert_called_once_with(
        BackupRequest(
            output_path="/backups",
            data_dir=str(app_settings.install_root),
            exclude_prometheus=True,
            verbose=True,
        ),
        [],
    )


def test_restore_backup_request(cli_env):
    assert yba_ctl.main(
        ["restoreBackup", "/backups/b.tgz", "--destination", "/opt/yugabyte", "--yugabundle", "--skip_dbdrop"]
    ) == 0
    cli_env.restore_backup.assert_called_once_with(
        RestoreRequest(
            input_path="/backups/b.tgz",
            destination="/opt/yugabyte",
            yugabundle=True,
            skip_dbdrop=True,
        ),
        [],
    )


def test_stop(cli_env):
    assert yba_ctl.main(["stop"]) == 0
    cli_env.stop.assert_called_once_with()


def test_core_failure_exits_one(cli_env, caplog):
    cli_env.install.side_effect = PreflightError("Preflight checks failed.")
    with caplog.at_level(logging.CRITICAL, logger="yba-ctl-test"):
        assert yba_ctl.main(["install"]) == 1
    assert "Preflight checks failed." in caplog.text


def test_version_command(cli_env, app_settings, caplog):
    with caplog.at_level(logging.INFO, logger="yba-ctl-test"):
        assert yba_ctl.main(["version"]) == 0
    assert "2.20.1.0-b97" in caplog.text
    assert "not installed" in caplog.text
