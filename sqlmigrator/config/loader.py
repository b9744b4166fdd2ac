"""Configuration loader for the migrator.

Values are resolved in this order (first found wins):
1. Explicit command line arguments
2. Environment variables (MIGRATION_DIR, DATABASE_PATH)
3. The first config file found in the search paths
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sqlmigrator.config.schema import MigratorConfig, MigratorFileConfig
from sqlmigrator.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".migrate-config.yaml"

ENV_MAPPINGS = {
    "MIGRATION_DIR": "source_path",
    "DATABASE_PATH": "database_path",
}


def get_config_search_paths() -> list[Path]:
    """Get the list of paths to search for a config file.

    Returns paths in priority order:
    1. ./.migrate-config.yaml (project root)
    2. ~/.config/migrator/config.yaml (user config)
    """
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / ".config" / "migrator" / "config.yaml",
    ]


def find_config_file() -> Path | None:
    """Find the first existing config file from search paths."""
    for path in get_config_search_paths():
        if path.exists() and path.is_file():
            logger.debug(f"Found config file: {path}")
            return path
    return None


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its top-level mapping."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_file_config(config_file: Path | None = None) -> MigratorFileConfig | None:
    """Load the config file, or return None if there is none."""
    if config_file is None:
        config_file = find_config_file()
    elif not config_file.is_file():
        raise ConfigError(f"Config file not found: {config_file}")

    if config_file is None:
        logger.debug("No config file found")
        return None

    logger.info(f"Loading config from: {config_file}")
    try:
        return MigratorFileConfig(**load_yaml_file(config_file))
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {config_file}: {e}") from e


def apply_env_overrides(values: dict[str, Path | None]) -> None:
    """Fill values that are still unset from environment variables.

    Note: This modifies values in place.
    """
    for env_var, key in ENV_MAPPINGS.items():
        value = os.environ.get(env_var)
        if value and key in values and values[key] is None:
            values[key] = Path(value)


def _resolve(values: dict[str, Path | None], config_file: Path | None) -> dict[str, Path]:
    apply_env_overrides(values)

    missing = [key for key, value in values.items() if value is None]
    if missing:
        file_config = load_file_config(config_file)
        if file_config is not None:
            for key in missing:
                values[key] = getattr(file_config, key)

    missing = [key for key, value in values.items() if value is None]
    if missing:
        names = " and ".join(f"'{key}'" for key in missing)
        raise ConfigError(f"{names} not found in arguments or config file.")

    return {key: value for key, value in values.items() if value is not None}


def resolve_config(
    source: Path | None = None,
    database: Path | None = None,
    config_file: Path | None = None,
) -> MigratorConfig:
    """Resolve the migration directory and database path.

    The config file is only read when a value is missing from both the
    arguments and the environment.

    Raises:
        ConfigError: If a value cannot be found anywhere, or the config
            file is invalid.
    """
    values = _resolve({"source_path": source, "database_path": database}, config_file)
    return MigratorConfig(**values)


def resolve_source_path(source: Path | None = None, config_file: Path | None = None) -> Path:
    """Resolve only the migration directory, for commands that never open the database."""
    return _resolve({"source_path": source}, config_file)["source_path"]
