"""Tests for transaction handling, batch execution and the version store."""

import sqlite3

import pytest

from sqlmigrator.database import connect, execute_batch, split_statements, transaction
from sqlmigrator.engine import Migrations
from sqlmigrator.exceptions import ForeignKeyCheckError, MigrationExecutionError
from sqlmigrator.validation import ConsistencyValidator
from sqlmigrator.version_store import read_version, write_version
from helpers import table_names


class RollbackFailsConnection(sqlite3.Connection):
    """Connection whose ROLLBACK always fails."""

    def execute(self, sql, *args):
        if sql == "ROLLBACK":
            raise sqlite3.OperationalError("disk I/O error")
        return super().execute(sql, *args)


class TestSplitStatements:
    """Test splitting SQL scripts into statements."""

    def test_simple_statements(self):
        """Test statements separated by semicolons."""
        script = "CREATE TABLE a (id INTEGER);\nCREATE TABLE b (id INTEGER);\n"
        assert split_statements(script) == [
            "CREATE TABLE a (id INTEGER);",
            "CREATE TABLE b (id INTEGER);",
        ]

    def test_missing_final_semicolon(self):
        """Test the last statement does not need a semicolon."""
        assert split_statements("SELECT 1;\nSELECT 2") == ["SELECT 1;", "SELECT 2"]

    def test_semicolon_in_string(self):
        """Test semicolons inside literals do not split."""
        script = "INSERT INTO t VALUES ('a;b');"
        assert split_statements(script) == [script]

    def test_trigger_body(self):
        """Test a trigger body stays one statement."""
        trigger = (
            "CREATE TRIGGER tr AFTER INSERT ON a BEGIN\n"
            "  INSERT INTO b VALUES (new.id);\n"
            "  INSERT INTO b VALUES (new.id + 1);\n"
            "END;"
        )
        assert split_statements(trigger + "\nSELECT 1;") == [trigger, "SELECT 1;"]

    def test_comment_only_script(self):
        """Test a generated placeholder script has no statements."""
        assert split_statements("-- Up migration `0001-init` generated at 2024-01-01 00:00:00.") == []

    def test_empty_script(self):
        """Test empty and whitespace-only scripts."""
        assert split_statements("") == []
        assert split_statements("  \n;\n") == []


class TestExecuteBatch:
    """Test executing scripts."""

    def test_executes_all_statements(self, conn):
        """Test every statement runs."""
        execute_batch(conn, "CREATE TABLE a (id INTEGER); CREATE TABLE b (id INTEGER);")
        assert table_names(conn) == {"a", "b"}

    def test_failure_carries_statement(self, conn):
        """Test the failing statement is attached to the error."""
        with pytest.raises(MigrationExecutionError) as exc_info:
            execute_batch(conn, "CREATE TABLE a (id INTEGER);\nDROP TABLE missing;")
        assert exc_info.value.query == "DROP TABLE missing;"
        assert "DROP TABLE missing" in str(exc_info.value)


class TestTransaction:
    """Test the transaction context manager."""

    def test_commit_on_success(self, conn):
        """Test DDL inside the block is committed."""
        with transaction(conn):
            conn.execute("CREATE TABLE a (id INTEGER)")
        assert not conn.in_transaction
        assert table_names(conn) == {"a"}

    def test_rollback_on_error(self, conn):
        """Test DDL and DML are both rolled back on error."""
        with pytest.raises(ValueError):
            with transaction(conn):
                conn.execute("CREATE TABLE a (id INTEGER)")
                conn.execute("INSERT INTO a VALUES (1)")
                write_version(conn, 5)
                raise ValueError("boom")
        assert table_names(conn) == set()
        assert read_version(conn) == 0
        assert not conn.in_transaction

    def test_restores_isolation_level(self, conn):
        """Test the caller's isolation level is restored."""
        conn.isolation_level = "IMMEDIATE"
        with transaction(conn):
            assert conn.isolation_level is None
        assert conn.isolation_level == "IMMEDIATE"

    def test_refuses_open_transaction(self, conn):
        """Test an already open transaction is not silently committed."""
        conn.execute("CREATE TABLE a (id INTEGER)")
        conn.execute("INSERT INTO a VALUES (1)")
        assert conn.in_transaction
        with pytest.raises(MigrationExecutionError, match="open transaction"):
            with transaction(conn):
                pass

    def test_rollback_failure_keeps_original_error(self, caplog):
        """Test a failing ROLLBACK is logged and the block's error still propagates."""
        connection = sqlite3.connect(":memory:", factory=RollbackFailsConnection)
        try:
            with pytest.raises(ValueError, match="boom"):
                with transaction(connection):
                    connection.execute("CREATE TABLE a (id INTEGER)")
                    raise ValueError("boom")
        finally:
            connection.close()
        assert "Failed to roll back migration transaction" in caplog.text

    def test_connect_file(self, db_path):
        """Test connect opens a database file."""
        connection = connect(db_path)
        try:
            connection.execute("CREATE TABLE a (id INTEGER)")
        finally:
            connection.close()
        assert db_path.exists()

    def test_connect_failure(self, tmp_path):
        """Test an unopenable path becomes a MigrationExecutionError."""
        with pytest.raises(MigrationExecutionError):
            connect(tmp_path / "missing" / "dir" / "test.db")


class TestVersionStore:
    """Test reading and writing user_version."""

    def test_default_is_zero(self, conn):
        """Test a new database is at version 0."""
        assert read_version(conn) == 0

    def test_write_then_read(self, conn):
        """Test a written version is read back."""
        write_version(conn, 12)
        assert read_version(conn) == 12

    def test_persists_in_file(self, db_path):
        """Test the version is stored in the database file."""
        connection = sqlite3.connect(db_path)
        write_version(connection, 3)
        connection.close()

        connection = sqlite3.connect(db_path)
        try:
            assert read_version(connection) == 3
        finally:
            connection.close()

    def test_negative_rejected(self, conn):
        """Test negative versions are refused."""
        with pytest.raises(ValueError):
            write_version(conn, -1)

    def test_read_failure(self, conn):
        """Test a closed connection raises MigrationExecutionError."""
        conn.close()
        with pytest.raises(MigrationExecutionError):
            read_version(conn)

    def test_negative_stored_version(self, conn):
        """Test a negative user_version set by another tool is an execution error."""
        conn.execute("PRAGMA user_version = -1")
        with pytest.raises(MigrationExecutionError, match="invalid schema version") as exc_info:
            read_version(conn)
        assert exc_info.value.query == "PRAGMA user_version"

    def test_negative_stored_version_blocks_migration(self, conn, revertible_steps):
        """Test the engine surfaces a negative version as a MigrationError."""
        conn.execute("PRAGMA user_version = -5")
        with pytest.raises(MigrationExecutionError):
            Migrations(revertible_steps).to_latest(conn)
        assert table_names(conn) == set()


class TestConsistencyValidator:
    """Test the consistency validator."""

    def test_passes_on_clean_database(self, conn):
        """Test no rows means no error."""
        ConsistencyValidator()(conn)

    def test_reports_first_violation(self, conn):
        """Test the first violating row is described in the error."""
        conn.executescript(
            """
            CREATE TABLE parent (id INTEGER PRIMARY KEY);
            CREATE TABLE child (id INTEGER PRIMARY KEY, parent_id INTEGER REFERENCES parent(id));
            INSERT INTO child VALUES (7, 99);
            """
        )
        with pytest.raises(ForeignKeyCheckError) as exc_info:
            ConsistencyValidator()(conn)
        message = str(exc_info.value)
        assert "table: 'child'" in message
        assert "rowid: 7" in message
        assert "parent: 'parent'" in message

    def test_custom_query(self, conn):
        """Test any query returning rows fails the check."""
        with pytest.raises(ForeignKeyCheckError, match="problem: 'bad'"):
            ConsistencyValidator("SELECT 'bad' AS problem")(conn)

    def test_broken_query(self, conn):
        """Test a failing query is an execution error, not a violation."""
        with pytest.raises(MigrationExecutionError) as exc_info:
            ConsistencyValidator("SELECT * FROM nowhere")(conn)
        assert not isinstance(exc_info.value, ForeignKeyCheckError)
