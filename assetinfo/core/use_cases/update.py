"""
Update use case — refresh the local catalog from the update source.

Ties together config, the catalog updater, and a catalog reload so the
caller knows the freshly installed catalog actually loads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from assetinfo.core.config.loader import Config
from assetinfo.core.errors import CatalogError, UpdateError
from assetinfo.core.services.catalog import ProgramCatalog
from assetinfo.core.services.catalog_update import CatalogUpdater

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Result of the update use case."""

    database_folder: Path | None = None
    installed: list[str] = field(default_factory=list)
    programs_loaded: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "database_folder": str(self.database_folder),
            "installed": self.installed,
            "programs_loaded": self.programs_loaded,
        }


def update_catalog(config: Config) -> UpdateResult:
    """Download, verify, install and reload the catalog.

    Any failure is reported in ``result.error``; the previously
    installed catalog is left in place.
    """
    folder = config.database_folder
    result = UpdateResult(database_folder=folder)

    if folder.exists() and not folder.is_dir():
        result.error = f"Database folder path is not a folder: {folder}"
        logger.error(result.error)
        return result

    try:
        folder.mkdir(parents=True, exist_ok=True)
        updater = CatalogUpdater(config.update_url, folder, timeout=config.http_timeout)
        result.installed = updater.run()
        result.programs_loaded = len(ProgramCatalog.load(folder))
    except (UpdateError, CatalogError, OSError) as e:
        result.error = str(e)
        logger.error("Catalog update failed: %s", e)
        return result

    logger.info("Catalog updated: %d programs", result.programs_loaded)
    return result
