"""
Hash databases — map a file's SHA-256 digest to a known program version.

Any object with ``get(hash) -> VersionedProgramInfo | None`` is a hash
database.  Backends raise ``HashDatabaseError`` when they cannot answer;
"not found" is ``None``, never an exception.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from assetinfo import __version__
from assetinfo.core.errors import HashDatabaseError
from assetinfo.core.models.scan import VersionedProgramInfo

logger = logging.getLogger(__name__)


@runtime_checkable
class HashDatabase(Protocol):
    """Lookup interface shared by all hash database backends."""

    def get(self, hash: str) -> VersionedProgramInfo | None: ...


class InMemoryHashDatabase:
    """A dict-backed database, keyed by lowercase hex digest."""

    def __init__(self, entries: Mapping[str, VersionedProgramInfo] | None = None):
        self._entries = {k.lower(): v for k, v in (entries or {}).items()}

    def get(self, hash: str) -> VersionedProgramInfo | None:
        return self._entries.get(hash.lower())

    def __len__(self) -> int:
        return len(self._entries)


class JsonHashDatabase(InMemoryHashDatabase):
    """A database loaded from a JSON file::

        {
          "<sha256>": {"id": "...", "title": "...", "version": {...}},
          ...
        }
    """

    def __init__(self, path: Path):
        self.path = path
        super().__init__(self._load(path))
        logger.info("Loaded %d hashes from %s", len(self), path)

    @staticmethod
    def _load(path: Path) -> dict[str, VersionedProgramInfo]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise HashDatabaseError(f"Cannot read hash database {path}: {e}") from e

        if not isinstance(data, dict):
            raise HashDatabaseError(
                f"Expected a JSON object in {path}, got {type(data).__name__}"
            )

        try:
            return {
                digest: VersionedProgramInfo.model_validate(entry)
                for digest, entry in data.items()
            }
        except ValidationError as e:
            raise HashDatabaseError(f"Invalid hash database {path}: {e}") from e


class RemoteHashDatabase:
    """A database served over HTTP as ``{base_url}/{hash}.json``.

    404 means "unknown hash".  Any other failure is an error, so a flaky
    service never silently turns known files into unknown ones.
    """

    def __init__(self, base_url: str, *, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def get(self, hash: str) -> VersionedProgramInfo | None:
        url = f"{self.base_url}/{hash.lower()}.json"
        logger.debug("Looking up %s", url)

        req = urllib.request.Request(
            url,
            headers={"Accept": "application/json", "User-Agent": f"assetinfo/{__version__}"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            if e.code == 404:
                return None
            raise HashDatabaseError(f"Hash lookup failed: {url}: HTTP {e.code}") from e
        except (OSError, http.client.HTTPException) as e:
            raise HashDatabaseError(f"Hash lookup failed: {url}: {e}") from e

        try:
            return VersionedProgramInfo.model_validate_json(body)
        except ValidationError as e:
            raise HashDatabaseError(f"Invalid hash record from {url}: {e}") from e
