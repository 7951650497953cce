# common/db_utils.py
# -*- coding: utf-8 -*-
"""
Direct postgres access used by the yugabundle restore.
"""

import logging
from typing import Any, Dict, Optional

import psycopg
from psycopg import sql
from psycopg.conninfo import make_conninfo

from common.exceptions import DatabaseError

module_logger = logging.getLogger(__name__)


def build_conninfo(db_params: Dict[str, Any]) -> str:
    """Builds a libpq DSN from the non-empty entries of `db_params`, quoting values as needed."""
    return make_conninfo(
        **{key: value for key, value in db_params.items() if value is not None and value != ""}
    )


def redact_conninfo(db_params: Dict[str, Any]) -> str:
    """Same as build_conninfo, without the password."""
    return build_conninfo({k: v for k, v in db_params.items() if k != "password"})


def get_db_connection(
    db_params: Dict[str, Any],
    autocommit: bool = False,
    current_logger: Optional[logging.Logger] = None,
) -> psycopg.Connection:
    """
    Opens a Psycopg 3 connection.

    Args:
        db_params: libpq parameters (dbname, user, password, host, port).
        autocommit: Open the connection in autocommit mode, required for
            statements such as DROP DATABASE.

    Raises:
        DatabaseError: If the connection cannot be established. The message
            carries the connection string without the password.
    """
    logger_to_use = current_logger if current_logger else module_logger
    conninfo = build_conninfo(db_params)
    try:
        logger_to_use.debug(f"Connecting to postgres with '{redact_conninfo(db_params)}'")
        return psycopg.connect(conninfo, autocommit=autocommit)
    except psycopg.Error as e:
        raise DatabaseError(
            f"Can't connect to postgres DB with connection string: {redact_conninfo(db_params)}. Error: {e}"
        ) from e


def recreate_database(
    db_params: Dict[str, Any],
    database: str,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Drops `database` (if it exists) and creates it again, empty.

    `db_params` must point at a maintenance database (e.g. "postgres"), not at
    `database` itself.

    Raises:
        DatabaseError: If either statement fails. A failure after the drop
            means the database is gone and must be recreated by hand.
    """
    logger_to_use = current_logger if current_logger else module_logger
    with get_db_connection(db_params, autocommit=True, current_logger=logger_to_use) as conn:
        try:
            conn.execute(sql.SQL("DROP DATABASE IF EXISTS {}").format(sql.Identifier(database)))
        except psycopg.Error as e:
            raise DatabaseError(f"Error {e} trying to drop {database} DB.") from e
        logger_to_use.info(f"Dropped database {database}.")
        try:
            conn.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(database)))
        except psycopg.Error as e:
            raise DatabaseError(
                f"Error {e} trying to create {database} DB. The database was dropped; "
                f"create it manually with 'CREATE DATABASE {database};' before retrying the restore."
            ) from e
        logger_to_use.info(f"Created empty database {database}.")
