import json
import logging

import pytest

from common.logging_config import JSONFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("yba-ctl", logging.INFO, __file__, 10, "upgrade to %s", ("2.20.1.0",), None)
    record.phase = "upgrade"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "upgrade to 2.20.1.0"
    assert entry["level"] == "INFO"
    assert entry["service"] == "yba-ctl"
    assert entry["extra"] == {"phase": "upgrade"}


def test_setup_logging_writes_json_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "yba-ctl" / "yba-ctl.log"

    logger = setup_logging(log_level="WARNING", enable_console=False, log_file_path=log_file)
    logger.debug("debug goes to the file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert "debug goes to the file" in [line["message"] for line in lines]


def test_setup_logging_unwritable_file_warns(mocker, tmp_path, restore_root_logger):
    mocker.patch("logging.FileHandler", side_effect=PermissionError("denied"))
    logger = setup_logging(enable_console=False, log_file_path=tmp_path / "yba-ctl.log")
    assert logger.name == "yba-ctl"
