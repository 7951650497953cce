from setup.cli_handler import format_status_table, user_confirm
from ybactl.base_service import ServiceStatus, StatusType


def test_user_confirm_default_on_empty_answer(mocker, app_settings):
    mocker.patch("builtins.input", return_value="")
    assert user_confirm("Drop yugaware?", True, app_settings) is True
    assert user_confirm("Drop yugaware?", False, app_settings) is False


def test_user_confirm_explicit_no(mocker, app_settings):
    mocker.patch("builtins.input", return_value="n")
    assert user_confirm("Drop yugaware?", True, app_settings) is False


def test_user_confirm_eof_means_no(mocker, app_settings):
    mocker.patch("builtins.input", side_effect=EOFError)
    assert user_confirm("Drop yugaware?", True, app_settings) is False


def test_user_confirm_assume_yes_skips_prompt(mocker, app_settings):
    mock_input = mocker.patch("builtins.input")
    app_settings.assume_yes = True
    assert user_confirm("Drop yugaware?", False, app_settings) is True
    mock_input.assert_not_called()


def test_format_status_table(app_settings):
    statuses = [
        ServiceStatus(service="postgres", status=StatusType.RUNNING, version="2.20.1.0-b97", port=5432),
        ServiceStatus(service="yb-platform", status=StatusType.DEGRADED, detail="failed"),
    ]

    table = format_status_table(statuses, app_settings).splitlines()

    assert table[0].startswith("Service")
    assert "postgres" in table[2] and "running" in table[2] and "5432" in table[2]
    assert "degraded" in table[3]
    assert table[4].strip() == "failed"
