"""Scaffold a new, empty migration folder."""

import logging
from datetime import datetime
from pathlib import Path

from sqlmigrator.exceptions import MigrationError

logger = logging.getLogger(__name__)


def next_sequence_number(migration_dir: Path) -> int:
    """Get the id the next migration folder should use."""
    highest = 0
    for entry in migration_dir.iterdir():
        if not entry.is_dir():
            continue
        parts = entry.name.split("-")
        if len(parts) < 2:
            continue
        try:
            highest = max(highest, int(parts[0]))
        except ValueError:
            continue
    return highest + 1


def sanitize_name(migration_name: str) -> str:
    """Replace dashes and spaces with underscores, dropping trailing ones."""
    return migration_name.replace("-", "_").replace(" ", "_").rstrip("_")


def create_migration(
    migration_dir: Path,
    migration_name: str,
    now: datetime | None = None,
) -> Path:
    """Create ``<id>-<name>/`` with placeholder up.sql and down.sql files.

    Args:
        migration_dir: Directory holding the migration folders. Created if
            it does not exist.
        migration_name: Human readable name for the migration.
        now: Timestamp written into the placeholder files (default: now).

    Returns:
        Path of the new migration folder.
    """
    name = sanitize_name(migration_name)
    if not name:
        raise MigrationError(f"Invalid migration name: {migration_name!r}")

    try:
        migration_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise MigrationError(f"Failed to create migration directory: {e}") from e

    folder_name = f"{next_sequence_number(migration_dir):04}-{name}"
    migration_folder = migration_dir / folder_name

    try:
        migration_folder.mkdir()
    except OSError as e:
        raise MigrationError(
            f"Failed to create new migration folder inside migration directory: {e}"
        ) from e

    timestamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    for direction, file_name in (("Up", "up.sql"), ("Down", "down.sql")):
        path = migration_folder / file_name
        try:
            path.write_text(f"-- {direction} migration `{folder_name}` generated at {timestamp}.")
        except OSError as e:
            raise MigrationError(f"Failed to create and write {file_name}: {e}") from e

    logger.info(f"Created migration: {migration_folder}")
    return migration_folder
