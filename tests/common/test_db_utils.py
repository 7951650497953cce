from unittest.mock import MagicMock, call

import psycopg
import pytest
from psycopg.conninfo import conninfo_to_dict

from common.db_utils import (
    build_conninfo,
    get_db_connection,
    recreate_database,
    redact_conninfo,
)
from common.exceptions import DatabaseError

DB_PARAMS = {
    "dbname": "postgres",
    "user": "yba",
    "password": "s3cret",
    "host": "db",
    "port": 5432,
}


def _mock_connection(mocker):
    mock_conn = MagicMock()
    mock_conn.__enter__.return_value = mock_conn
    mocker.patch("psycopg.connect", return_value=mock_conn)
    return mock_conn


def test_build_conninfo_skips_empty_values():
    params = dict(DB_PARAMS, password=None, host="")
    assert build_conninfo(params) == "dbname=postgres user=yba port=5432"


def test_redact_conninfo_drops_password():
    assert "s3cret" not in redact_conninfo(DB_PARAMS)


def test_build_conninfo_quotes_special_characters():
    password = "p w'x\\y"
    params = dict(DB_PARAMS, password=password, user="yba admin")

    parsed = conninfo_to_dict(build_conninfo(params))

    assert parsed["password"] == password
    assert parsed["user"] == "yba admin"
    assert "password" not in conninfo_to_dict(redact_conninfo(params))
    assert conninfo_to_dict(redact_conninfo(params))["user"] == "yba admin"


def test_get_db_connection_successful(mocker):
    """Test successful database connection."""
    mock_conn = _mock_connection(mocker)
    assert get_db_connection(DB_PARAMS, autocommit=True) == mock_conn
    psycopg.connect.assert_called_once_with(build_conninfo(DB_PARAMS), autocommit=True)


def test_get_db_connection_error_hides_password(mocker):
    """Test connection failure raises without leaking the password."""
    mocker.patch("psycopg.connect", side_effect=psycopg.OperationalError("refused"))
    with pytest.raises(DatabaseError) as excinfo:
        get_db_connection(DB_PARAMS)
    assert "refused" in str(excinfo.value)
    assert "s3cret" not in str(excinfo.value)


def test_recreate_database_drops_then_creates(mocker):
    mock_conn = _mock_connection(mocker)

    recreate_database(DB_PARAMS, "yugaware")

    statements = [c.args[0].as_string(None) for c in mock_conn.execute.call_args_list]
    assert statements == [
        'DROP DATABASE IF EXISTS "yugaware"',
        'CREATE DATABASE "yugaware"',
    ]
    psycopg.connect.assert_has_calls([call(build_conninfo(DB_PARAMS), autocommit=True)])


def test_recreate_database_drop_failure_does_not_create(mocker):
    mock_conn = _mock_connection(mocker)
    mock_conn.execute.side_effect = psycopg.errors.ObjectInUse("in use")

    with pytest.raises(DatabaseError, match="trying to drop yugaware"):
        recreate_database(DB_PARAMS, "yugaware")
    assert mock_conn.execute.call_count == 1


def test_recreate_database_create_failure_names_recovery(mocker):
    mock_conn = _mock_connection(mocker)
    mock_conn.execute.side_effect = [None, psycopg.Error("disk full")]

    with pytest.raises(DatabaseError, match="create it manually"):
        recreate_database(DB_PARAMS, "yugaware")
