import pytest

from ybactl.preflight import (
    Check,
    CheckResult,
    CheckStatus,
    PreflightCheckSet,
    backup_check_set,
    install_check_set,
    restore_check_set,
    run_checks,
    should_fail,
    upgrade_check_set,
)
from ybactl.preflight.checks import DiskSpaceCheck, InstallExistsCheck, LicenseCheck
from ybactl.state_manager import InstallerState, Workflow, store_state


class StaticCheck(Check):
    def __init__(self, name, status, calls=None):
        self.name = name
        self.status = status
        self.calls = calls if calls is not None else []

    def execute(self, app_settings):
        self.calls.append(self.name)
        return self._result(self.status)


class RaisingCheck(Check):
    name = "raising"

    def execute(self, app_settings):
        raise RuntimeError("probe blew up")


def test_skipped_check_is_not_executed(app_settings):
    calls = []
    check_set = PreflightCheckSet(
        "test",
        [StaticCheck("disk_space", CheckStatus.FAIL, calls), StaticCheck("cpu", CheckStatus.PASS, calls)],
    )

    results = run_checks(check_set, app_settings, skip=["disk_space"])

    assert calls == ["cpu"]
    assert [r.status for r in results] == [CheckStatus.SKIPPED, CheckStatus.PASS]
    assert not should_fail(results)


def test_config_skip_list_is_merged(app_settings):
    app_settings.preflight.skip = ["cpu"]
    check_set = PreflightCheckSet("test", [StaticCheck("cpu", CheckStatus.FAIL)])
    assert run_checks(check_set, app_settings)[0].status == CheckStatus.SKIPPED


def test_unknown_skip_names_are_ignored(app_settings, mocker):
    mock_logger = mocker.MagicMock()
    check_set = PreflightCheckSet("test", [StaticCheck("cpu", CheckStatus.PASS)])

    results = run_checks(check_set, app_settings, skip=["nonsense"], current_logger=mock_logger)

    assert results[0].status == CheckStatus.PASS
    mock_logger.warning.assert_called_once()


def test_raising_check_becomes_failure(app_settings):
    results = run_checks(PreflightCheckSet("test", [RaisingCheck()]), app_settings)
    assert results[0].status == CheckStatus.FAIL
    assert "probe blew up" in results[0].detail


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ([CheckStatus.PASS, CheckStatus.WARNING], False),
        ([CheckStatus.SKIPPED], False),
        ([CheckStatus.PASS, CheckStatus.FAIL], True),
        ([], False),
    ],
)
def test_should_fail(statuses, expected):
    results = [CheckResult(name=f"c{i}", status=s) for i, s in enumerate(statuses)]
    assert should_fail(results) is expected


def test_duplicate_check_names_rejected():
    with pytest.raises(ValueError):
        PreflightCheckSet("test", [StaticCheck("cpu", CheckStatus.PASS), StaticCheck("cpu", CheckStatus.PASS)])


def test_install_check_set_includes_postgres_port(app_settings):
    check_set = install_check_set(app_settings)
    assert check_set.name == "install_with_postgres"
    ports_check = [c for c in check_set if c.name == "ports"][0]
    assert app_settings.postgres.install.port in ports_check.ports


def test_install_check_set_without_managed_postgres(existing_pg_settings):
    check_set = install_check_set(existing_pg_settings)
    assert check_set.name == "install"
    ports_check = [c for c in check_set if c.name == "ports"][0]
    assert existing_pg_settings.postgres.use_existing.port not in ports_check.ports


def test_upgrade_check_set_does_not_check_ports(app_settings):
    assert "ports" not in upgrade_check_set().names()


def test_disk_space_check(mocker, app_settings):
    mocker.patch("common.system_utils.free_disk_gb", return_value=10.0)
    assert DiskSpaceCheck().execute(app_settings).status == CheckStatus.FAIL


def test_install_exists_check(app_settings):
    assert InstallExistsCheck().execute(app_settings).status == CheckStatus.PASS

    store_state(InstallerState(current_workflow=Workflow.INSTALL), app_settings.state_file)
    assert InstallExistsCheck().execute(app_settings).status == CheckStatus.PASS

    store_state(InstallerState(version="2.18.1.0-b42"), app_settings.state_file)
    result = InstallExistsCheck().execute(app_settings)
    assert result.status == CheckStatus.FAIL
    assert "2.18.1.0-b42" in result.detail


def test_license_check_missing_file(app_settings, tmp_path):
    result = LicenseCheck(tmp_path / "nope.lic").execute(app_settings)
    assert result.status == CheckStatus.FAIL
    assert LicenseCheck().execute(app_settings).status == CheckStatus.WARNING


@pytest.mark.parametrize(
    "build_set, names",
    [
        (
            lambda settings, script: install_check_set(settings),
            ["user", "python", "install_exists", "license", "disk_space", "cpu", "memory",
             "postgres_config", "ports"],
        ),
        (
            lambda settings, script: upgrade_check_set(),
            ["user", "python", "license", "disk_space", "postgres_config"],
        ),
        (
            lambda settings, script: backup_check_set(script),
            ["installed_state", "postgres_config", "backup_script"],
        ),
        (
            lambda settings, script: restore_check_set(script),
            ["installed_state", "postgres_config", "backup_script", "disk_space"],
        ),
    ],
)
def test_every_check_can_be_skipped_by_its_documented_name(app_settings, tmp_path, mocker, build_set, names):
    mock_logger = mocker.MagicMock()
    check_set = build_set(app_settings, tmp_path / "missing_backup.sh")

    results = run_checks(check_set, app_settings, skip=names, current_logger=mock_logger)

    assert [r.name for r in results] == names
    assert all(r.status == CheckStatus.SKIPPED for r in results)
    assert not should_fail(results)
    mock_logger.warning.assert_not_called()
