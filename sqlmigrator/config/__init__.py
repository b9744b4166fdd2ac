"""Migrator configuration.

The migration directory and database path come from command line
arguments, environment variables, or a ``.migrate-config.yaml`` file.
"""

from sqlmigrator.config.loader import resolve_config, resolve_source_path
from sqlmigrator.config.schema import MigratorConfig, MigratorFileConfig

__all__ = [
    "MigratorConfig",
    "MigratorFileConfig",
    "resolve_config",
    "resolve_source_path",
]
