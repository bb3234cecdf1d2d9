"""
Scan use case — identify files in folders by their hash.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from assetinfo.core.config.loader import Config
from assetinfo.core.errors import HashDatabaseError
from assetinfo.core.models.scan import FileScanResult
from assetinfo.core.services.hash_database import (
    HashDatabase,
    JsonHashDatabase,
    RemoteHashDatabase,
)
from assetinfo.core.services.hash_scan import scan

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Result of the scan use case, sorted by file path."""

    results: list[FileScanResult] = field(default_factory=list)
    databases: int = 0
    error: str | None = None

    @property
    def identified(self) -> int:
        return sum(1 for r in self.results if r.identified)

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "databases": self.databases,
            "total": len(self.results),
            "identified": self.identified,
            "files": [r.model_dump(mode="json") for r in self.results],
        }


def build_databases(config: Config, extra: list[Path] | None = None) -> list[HashDatabase]:
    """Open the configured hash databases, in lookup order.

    Local JSON files come first (command-line files before configured
    ones), then the remote database if one is configured.

    Raises:
        HashDatabaseError: A local database file is missing or malformed.
    """
    databases: list[HashDatabase] = []
    for path in [*(extra or []), *config.hash_databases]:
        databases.append(JsonHashDatabase(path))
    if config.hash_database_url:
        databases.append(RemoteHashDatabase(config.hash_database_url, timeout=config.http_timeout))
    return databases


def run_scan(paths: list[Path], databases: list[HashDatabase]) -> ScanResult:
    """Scan ``paths`` against ``databases``.

    Unreadable folders and database failures abort the scan and are
    reported in ``result.error``.
    """
    result = ScanResult(databases=len(databases))
    try:
        found = scan(paths, databases)
    except (HashDatabaseError, OSError) as e:
        result.error = str(e)
        logger.error("Scan failed: %s", e)
        return result

    result.results = sorted(found, key=lambda r: r.file_path)
    return result
