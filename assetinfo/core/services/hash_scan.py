"""
Hash scanner — identify files by content fingerprint, without running them.

Every regular file directly inside a scanned folder is hashed with
SHA-256 and looked up in the given databases, in order.  The first
database that knows the hash wins.  Unknown files are still reported,
with ``program_info=None``.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from assetinfo.core.models.scan import FileScanResult, VersionedProgramInfo
from assetinfo.core.services.hash_database import HashDatabase

logger = logging.getLogger(__name__)

_CHUNK = 65536


def calculate_hash(path: Path) -> str:
    """SHA-256 hex digest of a file's content."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def scan_folder(folder: Path) -> list[tuple[Path, str]]:
    """Hash every regular file directly in ``folder``, skipping symlinks.

    Order follows the directory listing and is not sorted.

    Raises:
        OSError: If the folder or one of its files cannot be read.
    """
    file_hashes: list[tuple[Path, str]] = []
    for entry in folder.iterdir():
        if entry.is_file() and not entry.is_symlink():
            file_hashes.append((entry, calculate_hash(entry)))
    logger.debug("Hashed %d files in %s", len(file_hashes), folder)
    return file_hashes


def classify(file_hash: str, databases: Sequence[HashDatabase]) -> VersionedProgramInfo | None:
    """Ask each database in order; the first match wins.

    Database errors propagate and abort the caller's scan.
    """
    for database in databases:
        program_info = database.get(file_hash)
        if program_info is not None:
            return program_info
    return None


def scan(
    paths: Iterable[Path],
    databases: Sequence[HashDatabase],
) -> list[FileScanResult]:
    """Scan folders and classify every file found.

    Returns:
        One FileScanResult per file, identified or not.

    Raises:
        OSError: A folder or file could not be read.
        HashDatabaseError: A database failed to answer.
    """
    results: list[FileScanResult] = []

    for path in paths:
        for file_path, file_hash in scan_folder(path):
            program_info = classify(file_hash, databases)
            if program_info is not None:
                logger.info("%s identified as %s %s", file_path, program_info.title, program_info.version)
            results.append(FileScanResult(
                file_path=file_path,
                file_hash=file_hash,
                program_info=program_info,
            ))

    return results
