"""sqlmigrator - versioned, reversible SQLite schema migrations."""

from sqlmigrator.engine import Migrations
from sqlmigrator.exceptions import (
    ConfigError,
    ForeignKeyCheckError,
    LoaderError,
    MigrationDefinitionError,
    MigrationError,
    MigrationExecutionError,
)
from sqlmigrator.models import SchemaVersion, Step, StepSequence, VersionKind

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ForeignKeyCheckError",
    "LoaderError",
    "MigrationDefinitionError",
    "MigrationError",
    "MigrationExecutionError",
    "Migrations",
    "SchemaVersion",
    "Step",
    "StepSequence",
    "VersionKind",
    "__version__",
]
