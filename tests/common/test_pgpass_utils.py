import stat

from common.pgpass_utils import format_pgpass_entry, write_pgpass_file


def test_format_pgpass_entry():
    assert (
        format_pgpass_entry("localhost", 5432, "yugaware", "postgres", "pw")
        == "localhost:5432:yugaware:postgres:pw"
    )


def test_pgpass_written_owner_only(tmp_path, app_settings, mocker):
    mock_logger = mocker.MagicMock()
    pgpass = tmp_path / "yba-ctl" / ".pgpass"

    result = write_pgpass_file(
        pgpass, "db", 5433, "yugaware", "yba", "s3cret",
        app_settings=app_settings, current_logger=mock_logger,
    )

    assert result == pgpass
    assert pgpass.read_text() == "db:5433:yugaware:yba:s3cret\n"
    assert stat.S_IMODE(pgpass.stat().st_mode) == 0o600
    mock_logger.debug.assert_called()


def test_pgpass_rewrite_truncates_previous_entry(tmp_path):
    pgpass = tmp_path / ".pgpass"
    pgpass.write_text("old:1:olddb:olduser:a-much-longer-old-password\n")
    pgpass.chmod(0o644)

    write_pgpass_file(pgpass, "db", 5432, "yugaware", "yba", "pw")

    assert pgpass.read_text() == "db:5432:yugaware:yba:pw\n"
    assert stat.S_IMODE(pgpass.stat().st_mode) == 0o600


def test_format_pgpass_entry_escapes_separators():
    assert (
        format_pgpass_entry("db", 5432, "yugaware", "yba", "a:b\\c")
        == "db:5432:yugaware:yba:a\\:b\\\\c"
    )


def test_pgpass_written_with_escaped_password(tmp_path):
    pgpass = tmp_path / ".pgpass"

    write_pgpass_file(pgpass, "db", 5432, "yugaware", "yba", "pa:ss")

    assert pgpass.read_text() == "db:5432:yugaware:yba:pa\\:ss\n"
