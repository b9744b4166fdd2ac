"""Migration steps and the ordered sequence the engine runs."""

import sqlite3
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from sqlmigrator.exceptions import MigrationDefinitionError
from sqlmigrator.models.version import SchemaVersion


class MigrationHook(Protocol):
    """Python code run inside the migration transaction.

    Any callable taking the connection works. Raise to abort the migration.
    """

    def __call__(self, conn: sqlite3.Connection) -> None: ...


@dataclass(frozen=True)
class Step:
    """One numbered migration.

    Attributes:
        up: SQL applied when migrating forward.
        down: SQL applied when reverting, or None if the step is not revertible.
        up_hook: Called after ``up`` (and after the foreign key check).
        down_hook: Called before ``down``.
        foreign_key_check: Run the consistency validator after ``up``.
        name: Label used in logs and error messages.
    """

    up: str
    down: str | None = None
    up_hook: MigrationHook | None = None
    down_hook: MigrationHook | None = None
    foreign_key_check: bool = False
    name: str | None = None

    def revertible(self, version: int) -> "RevertibleStep":
        """Return the revert view of this step.

        Raises:
            MigrationDefinitionError: If the step has no down script.
        """
        if self.down is None:
            raise MigrationDefinitionError(
                f"migration definition: down not defined for migration {version}"
                + (f" ({self.name})" if self.name else "")
            )
        return RevertibleStep(
            version=version,
            down=self.down,
            down_hook=self.down_hook,
            name=self.name,
        )

    def describe(self, version: int) -> str:
        return f"{version} ({self.name})" if self.name else str(version)


@dataclass(frozen=True)
class RevertibleStep:
    """A step already known to have a down script."""

    version: int
    down: str
    down_hook: MigrationHook | None = None
    name: str | None = None


class StepSequence:
    """Ordered, 1-indexed, contiguous collection of steps.

    Version ``v`` is stored at index ``v - 1``. The loader guarantees the
    numbering; the sequence only stores what it is given.
    """

    def __init__(self, steps: Iterable[Step] = ()):
        self._steps: tuple[Step, ...] = tuple(steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __repr__(self) -> str:
        return f"StepSequence({len(self._steps)} steps)"

    def step_for_version(self, version: int) -> Step:
        """Get the step that brings the database to ``version``."""
        if not 1 <= version <= len(self._steps):
            raise IndexError(f"no migration for version {version}")
        return self._steps[version - 1]

    @property
    def max_version(self) -> SchemaVersion:
        return SchemaVersion.classify(len(self._steps), len(self._steps))

    def classify(self, raw: int) -> SchemaVersion:
        return SchemaVersion.classify(raw, len(self._steps))
