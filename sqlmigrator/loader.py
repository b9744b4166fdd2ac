"""Load migration steps from a directory.

Layout::

    migrations/
        0001-create_users/
            up.sql
            down.sql      (optional)
        0002-add_email/
            up.sql

Folder ids must be unique and form the sequence 1..N.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from sqlmigrator.exceptions import LoaderError
from sqlmigrator.models.step import Step

logger = logging.getLogger(__name__)

UP_SUFFIX = "up.sql"
DOWN_SUFFIX = "down.sql"


def get_id(folder_name: str) -> int:
    """Parse the numeric id prefix of a migration folder name."""
    prefix, sep, _ = folder_name.partition("-")
    if not sep:
        raise LoaderError(f"Could not extract migration id from file name {folder_name}")

    try:
        migration_id = int(prefix)
    except ValueError as e:
        raise LoaderError(
            f"Could not parse migration id from file name {folder_name} as integer: {e}"
        ) from e

    if migration_id < 1:
        raise LoaderError(
            f"{folder_name} has an incorrect migration id: migration id must be positive"
        )
    return migration_id


def read_scripts(folder: Path) -> tuple[str | None, str | None]:
    """Read the up and down scripts of one migration folder.

    A missing down script means the migration cannot be reverted. A down
    script that exists but cannot be read is an error.
    """
    up: str | None = None
    down: str | None = None

    for entry in sorted(folder.iterdir()):
        if not entry.is_file():
            continue
        try:
            if entry.name.endswith(UP_SUFFIX):
                up = entry.read_text(encoding="utf-8")
            elif entry.name.endswith(DOWN_SUFFIX):
                down = entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LoaderError(f"Could not read migration script {entry}: {e}") from e

    return up, down


@dataclass
class MigrationFile:
    """Contents of one migration folder."""

    id: int
    name: str
    up: str
    down: str | None = None

    @classmethod
    def from_path(cls, folder: Path) -> "MigrationFile":
        migration_id = get_id(folder.name)
        up, down = read_scripts(folder)
        if up is None:
            raise LoaderError(f"Migration {folder.name} has no {UP_SUFFIX} file")
        return cls(id=migration_id, name=folder.name, up=up, down=down)

    def to_step(self) -> Step:
        return Step(up=self.up, down=self.down, name=self.name)


def load_migration_files(migration_dir: Path) -> list[MigrationFile]:
    """Parse every migration folder, ordered by id.

    Raises:
        LoaderError: On unreadable folders, bad or duplicate ids, gaps in
            the numbering, or an empty directory.
    """
    if not migration_dir.is_dir():
        raise LoaderError(f"Migration directory not found: {migration_dir}")

    folders = sorted(
        (p for p in migration_dir.iterdir() if p.is_dir() and not p.name.startswith(".")),
        key=lambda p: p.name,
    )

    by_id: dict[int, MigrationFile] = {}
    for folder in folders:
        migration_file = MigrationFile.from_path(folder)
        if migration_file.id in by_id:
            raise LoaderError(
                f"Multiple migrations detected for migration id: {migration_file.id}"
            )
        by_id[migration_file.id] = migration_file
        logger.debug(f"Discovered migration: {migration_file.id} - {migration_file.name}")

    if not by_id:
        raise LoaderError("Directory does not contain any migration files")

    if sorted(by_id) != list(range(1, len(by_id) + 1)):
        raise LoaderError("Migration ids must be consecutive numbers")

    return [by_id[i] for i in range(1, len(by_id) + 1)]


def from_directory(migration_dir: Path) -> list[Step]:
    """Load the ordered list of steps defined in ``migration_dir``."""
    return [m.to_step() for m in load_migration_files(Path(migration_dir))]
