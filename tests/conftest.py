"""Pytest configuration and fixtures for sqlmigrator tests."""

import sqlite3
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from sqlmigrator.models import Step
from helpers import ADD_COLUMN, ADD_INDEX, CREATE_TABLE


@pytest.fixture
def conn() -> Generator[sqlite3.Connection, None, None]:
    """A fresh in-memory database."""
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of a database file inside the test's temporary directory."""
    return tmp_path / "test.db"


@pytest.fixture
def revertible_steps() -> list[Step]:
    """create_table, add_column, add_index; every step revertible."""
    return [
        Step(CREATE_TABLE, down="DROP TABLE users;", name="create_table"),
        Step(ADD_COLUMN, down="ALTER TABLE users DROP COLUMN email;", name="add_column"),
        Step(ADD_INDEX, down="DROP INDEX ix_users_email;", name="add_index"),
    ]


@pytest.fixture
def make_migration_dir(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a migration directory.

    Each item is ``(folder_name, up_sql, down_sql_or_None)``.
    """

    def _make(migrations: list[tuple[str, str, str | None]], name: str = "migrations") -> Path:
        root = tmp_path / name
        root.mkdir()
        for folder_name, up, down in migrations:
            folder = root / folder_name
            folder.mkdir()
            (folder / "up.sql").write_text(up)
            if down is not None:
                (folder / "down.sql").write_text(down)
        return root

    return _make

