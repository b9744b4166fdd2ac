"""SQLite connection and transaction helpers."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlmigrator.exceptions import MigrationExecutionError

logger = logging.getLogger(__name__)


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open a connection to the database file at ``db_path``."""
    try:
        return sqlite3.connect(str(db_path))
    except sqlite3.Error as e:
        raise MigrationExecutionError(f"could not open database {db_path}: {e}") from e


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the enclosed block in a single explicit transaction.

    The connection is switched to manual transaction control so that DDL
    statements are covered by the same ``BEGIN``. On any exception the
    transaction is rolled back and the exception re-raised unchanged.

    Raises:
        MigrationExecutionError: If the connection already has an open
            transaction, or BEGIN/COMMIT fails.
    """
    if conn.in_transaction:
        raise MigrationExecutionError(
            "connection already has an open transaction; commit or roll back first"
        )

    previous_isolation = conn.isolation_level
    conn.isolation_level = None
    try:
        logger.debug("start migration transaction")
        try:
            conn.execute("BEGIN")
        except sqlite3.Error as e:
            raise MigrationExecutionError(f"could not start transaction: {e}", "BEGIN") from e

        try:
            yield conn
        except BaseException:
            _rollback(conn)
            raise

        try:
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            _rollback(conn)
            raise MigrationExecutionError(f"could not commit transaction: {e}", "COMMIT") from e
        logger.debug("committed migration transaction")
    finally:
        conn.isolation_level = previous_isolation


def _rollback(conn: sqlite3.Connection) -> None:
    """Roll back the open transaction, logging rather than raising on failure.

    The caller is already propagating the error that triggered the rollback.
    """
    # SQLite rolls back by itself on some errors (e.g. SQLITE_FULL)
    if not conn.in_transaction:
        return
    try:
        conn.execute("ROLLBACK")
    except sqlite3.Error as e:
        logger.error(f"Failed to roll back migration transaction: {e}")
        return
    logger.debug("rolled back migration transaction")


def _is_blank(statement: str) -> bool:
    """Check whether a fragment holds nothing but comments and semicolons."""
    lines = [
        line.strip()
        for line in statement.splitlines()
        if line.strip() and not line.strip().startswith("--")
    ]
    return not "".join(lines).strip(";").strip()


def split_statements(script: str) -> list[str]:
    """Split a SQL script into complete statements.

    Semicolons inside string literals, comments and trigger bodies are kept
    with their statement, because a fragment is only emitted once
    ``sqlite3.complete_statement`` accepts it.
    """
    statements = []
    buffer = ""
    parts = script.split(";")

    for i, part in enumerate(parts):
        buffer += part
        if i == len(parts) - 1:
            break
        buffer += ";"
        if sqlite3.complete_statement(buffer):
            if not _is_blank(buffer):
                statements.append(buffer.strip())
            buffer = ""

    if not _is_blank(buffer):
        statements.append(buffer.strip())

    return statements


def execute_batch(conn: sqlite3.Connection, script: str) -> None:
    """Execute every statement of ``script`` on ``conn``, in order.

    ``Connection.executescript`` is avoided because it commits any pending
    transaction before running.

    Raises:
        MigrationExecutionError: On the first failing statement.
    """
    for statement in split_statements(script):
        logger.debug(f"Running: {statement}")
        try:
            conn.execute(statement)
        except sqlite3.Error as e:
            raise MigrationExecutionError(f"statement failed: {e}", statement) from e
