"""Configuration for ledger-migrate.

Configuration is read from a YAML file (``./ledger-migrate.yaml`` by
default) and validated with Pydantic. Every field has a default, so the
file is optional:

    migrations_dir: db/migrations
    ledger:
      backend: sqlite
      path: .ledger-migrate/ledger.db
      table: migrations

Relative paths are resolved against the directory holding the file.
"""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from ledger_migrate.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE = "ledger-migrate.yaml"
STATE_DIR = Path(".ledger-migrate")

_DEFAULT_LEDGER_FILES = {
    "json": "ledger.json",
    "sqlite": "ledger.db",
}


class LedgerConfig(BaseModel):
    """Where and how the applied-migrations ledger is stored.

    Attributes:
        backend: Storage backend (json, sqlite, or memory).
        path: Ledger file. Defaults to a file under ./.ledger-migrate/.
        table: Table name for the sqlite backend.
    """

    backend: Literal["json", "sqlite", "memory"] = Field(
        default="json", description="Ledger storage backend"
    )
    path: Path | None = Field(default=None, description="Ledger file path")
    table: str = Field(default="migrations", description="SQLite ledger table")

    def resolved_path(self) -> Path | None:
        """Return the ledger file path, applying the backend default."""
        if self.path is not None:
            return self.path
        filename = _DEFAULT_LEDGER_FILES.get(self.backend)
        if filename is None:
            return None
        return Path.cwd() / STATE_DIR / filename


class MigrateConfig(BaseModel):
    """Top-level configuration.

    Attributes:
        migrations_dir: Directory holding migration scripts.
        ledger: Ledger storage settings.
    """

    migrations_dir: Path = Field(default=Path("migrations"), description="Migration scripts")
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)


def _resolve_relative(config: MigrateConfig, base_dir: Path) -> MigrateConfig:
    """Anchor relative paths at the config file's directory."""
    if not config.migrations_dir.is_absolute():
        config.migrations_dir = base_dir / config.migrations_dir
    if config.ledger.path is not None and not config.ledger.path.is_absolute():
        config.ledger.path = base_dir / config.ledger.path
    return config


def load_config(path: Path | None = None) -> MigrateConfig:
    """Load configuration from YAML.

    Args:
        path: Config file to read. When omitted, ./ledger-migrate.yaml is
            used if it exists, otherwise defaults are returned.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If an explicit path does not exist, or the file
            is not valid YAML or fails validation.
    """
    if path is None:
        default = Path.cwd() / CONFIG_FILE
        if not default.exists():
            logger.debug(f"No {CONFIG_FILE} found, using defaults")
            return MigrateConfig()
        path = default
    elif not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {path} must be a mapping, got {type(data).__name__}")

    try:
        config = MigrateConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    return _resolve_relative(config, path.parent)
