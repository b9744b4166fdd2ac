"""Post-migration consistency checks."""

import logging
import sqlite3

from sqlmigrator.exceptions import ForeignKeyCheckError, MigrationExecutionError

logger = logging.getLogger(__name__)

FOREIGN_KEY_CHECK_QUERY = "PRAGMA foreign_key_check"


class ConsistencyValidator:
    """Run an integrity query and fail on the first row it returns.

    The default query is ``PRAGMA foreign_key_check``, which reports rows
    whose foreign keys point at missing parents. It works whether or not
    foreign key enforcement is enabled on the connection.
    """

    def __init__(self, query: str = FOREIGN_KEY_CHECK_QUERY):
        self.query = query

    def __call__(self, conn: sqlite3.Connection) -> None:
        """Check the database seen by ``conn``.

        Raises:
            ForeignKeyCheckError: If the query returns at least one row.
            MigrationExecutionError: If the query itself fails.
        """
        try:
            cursor = conn.execute(self.query)
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise MigrationExecutionError(f"consistency check failed to run: {e}", self.query) from e

        if row is None:
            return

        columns = [d[0] for d in cursor.description or ()]
        details = ", ".join(
            f"{name}: {value!r}" for name, value in zip(columns, row)
        )
        logger.warning(f"Consistency check violation: {details}")
        raise ForeignKeyCheckError(f"foreign key error: {details}", self.query)
