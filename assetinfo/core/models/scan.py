"""
Hash scan models — fingerprint lookups and per-file results.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from assetinfo.core.models.version import Version


class VersionedProgramInfo(BaseModel):
    """What a hash database knows about one file digest."""

    id: str
    title: str
    version: Version


class FileScanResult(BaseModel):
    """Classification of one scanned file.

    ``program_info`` is None when no database recognised the hash.
    That is a normal outcome, not an error.
    """

    file_path: Path
    file_hash: str
    program_info: VersionedProgramInfo | None = None

    @property
    def identified(self) -> bool:
        return self.program_info is not None
