"""Shared SQL snippets and schema inspection helpers for sqlmigrator tests."""

import sqlite3

from sqlmigrator.version_store import read_version

CREATE_TABLE = "CREATE TABLE users (id INTEGER PRIMARY KEY, username TEXT NOT NULL);"
ADD_COLUMN = "ALTER TABLE users ADD COLUMN email TEXT;"
ADD_INDEX = "CREATE UNIQUE INDEX ix_users_email ON users (email);"


def table_names(connection: sqlite3.Connection) -> set[str]:
    """Names of user tables in the database."""
    rows = connection.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
    ).fetchall()
    return {row[0] for row in rows}


def index_names(connection: sqlite3.Connection) -> set[str]:
    """Names of explicitly created indexes."""
    rows = connection.execute(
        "SELECT name FROM sqlite_master WHERE type='index' AND sql IS NOT NULL"
    ).fetchall()
    return {row[0] for row in rows}


def column_names(connection: sqlite3.Connection, table: str) -> set[str]:
    """Column names of a table."""
    return {row[1] for row in connection.execute(f"PRAGMA table_info({table})").fetchall()}


def version_of(connection: sqlite3.Connection) -> int:
    return read_version(connection)
