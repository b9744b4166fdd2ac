"""Pydantic models for migrator configuration.

These models define the structure of ``.migrate-config.yaml``.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class MigratorFileConfig(BaseModel):
    """Contents of a config file. Either value may be left out."""

    model_config = ConfigDict(extra="forbid")

    source_path: Path | None = None
    database_path: Path | None = None


class MigratorConfig(BaseModel):
    """Fully resolved configuration used to run the migrator."""

    source_path: Path
    database_path: Path
