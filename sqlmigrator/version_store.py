"""Persisted schema version, kept in SQLite's ``user_version`` header field."""

import logging
import sqlite3

from sqlmigrator.exceptions import MigrationExecutionError

logger = logging.getLogger(__name__)

READ_VERSION_QUERY = "PRAGMA user_version"


def read_version(conn: sqlite3.Connection) -> int:
    """Get the schema version stored in the database.

    Returns 0 if no migration has ever been applied. A negative value can
    only be set by another tool and is reported as an error.
    """
    try:
        row = conn.execute(READ_VERSION_QUERY).fetchone()
    except sqlite3.Error as e:
        raise MigrationExecutionError(f"could not read schema version: {e}", READ_VERSION_QUERY) from e
    version = int(row[0]) if row else 0
    if version < 0:
        raise MigrationExecutionError(
            f"invalid schema version stored in database: {version}", READ_VERSION_QUERY
        )
    return version


def write_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the schema version.

    Must be called inside the migration transaction, right before commit.
    """
    if version < 0:
        raise ValueError(f"schema version cannot be negative: {version}")

    # PRAGMA does not accept bound parameters
    query = f"PRAGMA user_version = {int(version)}"
    logger.debug(f"set user version to: {version}")
    try:
        conn.execute(query)
    except sqlite3.Error as e:
        raise MigrationExecutionError(f"could not write schema version: {e}", query) from e
