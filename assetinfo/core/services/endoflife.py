"""
endoflife.date client — release cycle lookups.

The base URL comes from configuration and is passed in explicitly;
there is no module-level default client.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.request
from dataclasses import dataclass
from datetime import date
from typing import Any
from urllib.parse import quote

from pydantic import TypeAdapter, ValidationError

from assetinfo import __version__
from assetinfo.core.errors import EndOfLifeError
from assetinfo.core.models.endoflife import CycleId, ReleaseCycle

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://endoflife.date/api"

_CYCLES = TypeAdapter(list[ReleaseCycle])
_PRODUCTS = TypeAdapter(list[str])


class EndOfLifeDateClient:
    """Thin client over the endoflife.date JSON API."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, *, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get_json(self, url: str) -> Any:
        req = urllib.request.Request(
            url,
            headers={"Accept": "application/json", "User-Agent": f"assetinfo/{__version__}"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                logger.info("Received response %s", resp.status)
                return json.loads(resp.read())
        except (OSError, ValueError, http.client.HTTPException) as e:
            # json.JSONDecodeError is a ValueError
            raise EndOfLifeError(f"Request failed: {url}: {e}") from e

    def get_release_cycles(self, product: str) -> list[ReleaseCycle]:
        """All release cycles of ``product``."""
        url = f"{self.base_url}/{quote(product)}.json"
        logger.info("Retrieving ReleaseCycles for %s from %s", product, url)
        try:
            return _CYCLES.validate_python(self._get_json(url))
        except ValidationError as e:
            raise EndOfLifeError(f"Unexpected response from {url}: {e}") from e

    def get_release_cycle(self, product: str, cycle: CycleId) -> ReleaseCycle:
        """A single release cycle, e.g. ``("nginx", "1.18")``."""
        cycle_text = str(cycle)
        url = f"{self.base_url}/{quote(product)}/{quote(cycle_text)}.json"
        logger.info("Retrieving ReleaseCycle %s for %s from %s", cycle_text, product, url)
        try:
            return ReleaseCycle.model_validate(self._get_json(url))
        except ValidationError as e:
            raise EndOfLifeError(f"Unexpected response from {url}: {e}") from e

    def get_all_products(self) -> list[str]:
        """Every product id the service knows."""
        url = f"{self.base_url}/all.json"
        logger.info("Retrieving supported products from %s", url)
        try:
            return _PRODUCTS.validate_python(self._get_json(url))
        except ValidationError as e:
            raise EndOfLifeError(f"Unexpected response from {url}: {e}") from e


@dataclass
class SupportStatus:
    """How a release cycle stands relative to today."""

    supported: bool
    eol_date: date | None = None
    days: int | None = None       # days until EOL (>0) or since EOL (<=0)

    def describe(self, cycle: str) -> str:
        if self.eol_date is None:
            return f"Version {cycle} is {'supported' if self.supported else 'not supported'}"
        if self.days is not None and self.days > 0:
            return f"Version {cycle} will be supported for {self.days} days ({self.eol_date})"
        return f"Version {cycle} is not supported since {abs(self.days or 0)} days ({self.eol_date})"


def support_status(release_cycle: ReleaseCycle, today: date | None = None) -> SupportStatus:
    """Compare a cycle's EOL against ``today`` (default: the current date)."""
    today = today or date.today()
    eol_date = release_cycle.eol_date()
    if eol_date is None:
        return SupportStatus(supported=release_cycle.is_supported(today))
    remaining = (eol_date - today).days
    return SupportStatus(supported=remaining > 0, eol_date=eol_date, days=remaining)
