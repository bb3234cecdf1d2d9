"""
Configuration loader — reads assetinfo.yml into a typed Config.

It reads YAML (JSON configs parse too), validates against a Pydantic
schema, and resolves relative paths against the config file's folder.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from assetinfo.core.services.endoflife import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "assetinfo.yml"

# Env var pointing at an explicit config file
CONFIG_ENV = "ASSETINFO_CONFIG"


class ConfigError(Exception):
    """Raised when the configuration is invalid or missing."""


class Config(BaseModel):
    """Runtime settings for every command."""

    database_folder: Path = Path("database")
    update_url: str = ""
    log_level: str | None = None
    endoflife_base_url: str = DEFAULT_BASE_URL
    command_timeout: int = Field(default=30, gt=0)
    http_timeout: int = Field(default=30, gt=0)
    hash_databases: list[Path] = Field(default_factory=list)
    hash_database_url: str | None = None

    def resolve_paths(self, base: Path) -> Config:
        """Return a copy with relative paths anchored at ``base``."""
        return self.model_copy(update={
            "database_folder": _anchor(self.database_folder, base),
            "hash_databases": [_anchor(p, base) for p in self.hash_databases],
        })


def _anchor(path: Path, base: Path) -> Path:
    path = path.expanduser()
    return path if path.is_absolute() else (base / path)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for assetinfo.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to assetinfo.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> Config:
    """Load and validate configuration.

    Lookup order: explicit ``path``, ``$ASSETINFO_CONFIG``, then
    assetinfo.yml searched upward from the cwd.  With no file at all,
    defaults relative to the cwd are used.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    if path is None and os.environ.get(CONFIG_ENV):
        path = Path(os.environ[CONFIG_ENV])

    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return Config().resolve_paths(Path.cwd())

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    return config.resolve_paths(path.parent.resolve())
