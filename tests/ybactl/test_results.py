from ybactl.results import best_effort


def test_best_effort_success():
    result = best_effort("noop", lambda: None)
    assert result.ok and not result.soft_failed


def test_best_effort_failure_is_logged_not_raised(mocker):
    mock_logger = mocker.MagicMock()

    def boom():
        raise PermissionError("chown: operation not permitted")

    result = best_effort("Setting permissions", boom, mock_logger)

    assert result.soft_failed
    assert "operation not permitted" in result.error
    mock_logger.warning.assert_called_once()
