"""Migration engine.

Computes the delta between the database's ``user_version`` and a target
version, then applies exactly the steps needed, forward or backward, inside
one transaction. Either every step runs and the new version is written, or
nothing is persisted.
"""

import logging
import sqlite3
from collections.abc import Callable, Iterable
from pathlib import Path

from sqlmigrator.database import execute_batch, transaction
from sqlmigrator.exceptions import MigrationDefinitionError
from sqlmigrator import loader
from sqlmigrator.models.step import RevertibleStep, Step, StepSequence
from sqlmigrator.models.version import SchemaVersion
from sqlmigrator.validation import ConsistencyValidator
from sqlmigrator.version_store import read_version, write_version

logger = logging.getLogger(__name__)


class Migrations:
    """A fixed set of migrations that can be applied to SQLite databases.

    Example:
        migrations = Migrations([
            Step("CREATE TABLE users (id INTEGER PRIMARY KEY)", down="DROP TABLE users"),
            Step("ALTER TABLE users ADD COLUMN name TEXT"),
        ])
        migrations.to_latest(conn)
    """

    def __init__(
        self,
        steps: Iterable[Step] | StepSequence,
        validator: Callable[[sqlite3.Connection], None] | None = None,
    ):
        self._steps = steps if isinstance(steps, StepSequence) else StepSequence(steps)
        self._validator = validator or ConsistencyValidator()

    @classmethod
    def from_directory(cls, migration_dir: Path) -> "Migrations":
        """Load migrations from a directory of ``<id>-<name>/up.sql`` folders."""
        return cls(loader.from_directory(Path(migration_dir)))

    @property
    def steps(self) -> StepSequence:
        return self._steps

    def __len__(self) -> int:
        return len(self._steps)

    def current_version(self, conn: sqlite3.Connection) -> SchemaVersion:
        """Get the database version, classified against the known steps."""
        return self._steps.classify(read_version(conn))

    def pending(self, conn: sqlite3.Connection) -> list[tuple[int, Step]]:
        """List the (version, step) pairs ``to_latest`` would apply."""
        current = self.current_version(conn)
        if current.is_outside:
            return []
        return [
            (version, self._steps.step_for_version(version))
            for version in range(int(current) + 1, len(self._steps) + 1)
        ]

    def to_latest(self, conn: sqlite3.Connection) -> None:
        """Migrate the database to the last known version.

        Raises:
            MigrationDefinitionError: If no migration is defined.
        """
        max_version = self._steps.max_version
        if not max_version.is_set:
            logger.warning("no migration defined")
            raise MigrationDefinitionError("migration definition: no migration defined")

        logger.debug(f"some migrations defined (version: {max_version}), try to migrate")
        self._goto(conn, max_version)

    def to_version(self, conn: sqlite3.Connection, version: int) -> None:
        """Migrate the database up or down to ``version``.

        Raises:
            MigrationDefinitionError: If no migration is defined, or
                ``version`` is beyond the last known migration.
        """
        max_version = self._steps.max_version
        if not max_version.is_set:
            logger.warning("no migrations defined")
            raise MigrationDefinitionError("migration definition: no migration defined")

        target = self._steps.classify(version)
        if target.is_outside:
            logger.warning("specified version is higher than the max supported version")
            raise MigrationDefinitionError(
                f"specified schema version {target}: "
                f"higher than max supported version {max_version}"
            )

        logger.debug(f"some migrations defined (version: {max_version}), try to migrate")
        self._goto(conn, target)

    def validate(self) -> None:
        """Apply every migration to a throwaway in-memory database.

        Raises whatever ``to_latest`` would raise against a real database.
        """
        conn = sqlite3.connect(":memory:")
        try:
            self.to_latest(conn)
        finally:
            conn.close()

    def _goto(self, conn: sqlite3.Connection, target: SchemaVersion) -> None:
        current = self.current_version(conn)

        if target == current:
            logger.debug("no migration to run, db already up to date")
            return

        if target < current:
            if current.is_outside:
                logger.warning(f"database version {current} is ahead of known migrations")
                raise MigrationDefinitionError("migration definition: database too far ahead")
            logger.debug(
                f"rollback to older version requested, target: {target}, current: {current}"
            )
            self._goto_down(conn, int(current), int(target))
        else:
            logger.debug(f"some migrations to run, target: {target}, current: {current}")
            self._goto_up(conn, int(current), int(target))

        logger.info(f"Database migrated to version {int(target)}")

    def _goto_up(self, conn: sqlite3.Connection, current: int, target: int) -> None:
        with transaction(conn):
            for version in range(current + 1, target + 1):
                step = self._steps.step_for_version(version)
                logger.debug(f"Applying migration {step.describe(version)}")
                execute_batch(conn, step.up)

                if step.foreign_key_check:
                    self._validator(conn)

                if step.up_hook is not None:
                    step.up_hook(conn)

            write_version(conn, target)

    def _goto_down(self, conn: sqlite3.Connection, current: int, target: int) -> None:
        to_revert = self._check_revertible(current, target)

        with transaction(conn):
            for step in to_revert:
                logger.debug(f"Reverting migration {step.version}")
                if step.down_hook is not None:
                    step.down_hook(conn)
                execute_batch(conn, step.down)

            write_version(conn, target)

    def _check_revertible(self, current: int, target: int) -> list[RevertibleStep]:
        """Ensure every step in ``(target, current]`` has a down script.

        Runs before any transaction is opened. Returns the steps in the
        order they must be reverted (highest version first).
        """
        revertible = []
        for version in range(target + 1, current + 1):
            step = self._steps.step_for_version(version)
            if step.down is None:
                logger.warning(f"Cannot revert: migration {step.describe(version)}")
            revertible.append(step.revertible(version))
        revertible.reverse()
        return revertible
