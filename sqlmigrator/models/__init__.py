"""Data model for migrations."""

from sqlmigrator.models.step import MigrationHook, RevertibleStep, Step, StepSequence
from sqlmigrator.models.version import SchemaVersion, VersionKind

__all__ = [
    "MigrationHook",
    "RevertibleStep",
    "SchemaVersion",
    "Step",
    "StepSequence",
    "VersionKind",
]
