"""
Catalog update — download, verify and install a catalog archive.

The update source serves a compressed tar archive whose filename embeds
the SHA-256 digest of its own bytes::

    https://db.example.org/<sha256-hex>.tar.zstd

Stages run strictly in order and are never retried here:

    1. download   GET the URL, save under the catalog directory
    2. verify     recompute SHA-256, compare with the filename digest
    3. install    decompress to an intermediate .tar, unpack it over
                  the catalog directory, remove the intermediate files

Nothing is unpacked until download and verification have succeeded.
The archive is unpacked into a staging folder first and its files are
moved into the catalog only after the whole archive extracted cleanly,
so any failure leaves the installed catalog untouched.
"""

from __future__ import annotations

import bz2
import gzip
import http.client
import logging
import lzma
import re
import shutil
import tarfile
import tempfile
import urllib.request
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import zstandard

from assetinfo import __version__
from assetinfo.core.errors import IntegrityError, UpdateError
from assetinfo.core.services.hash_scan import calculate_hash

logger = logging.getLogger(__name__)

USER_AGENT = f"assetinfo/{__version__}"

_SHA256_HEX = re.compile(r"^[0-9a-f]{64}$")

_ZSTD_SUFFIXES = (".zst", ".zstd")
_STDLIB_OPENERS = {".gz": gzip.open, ".tgz": gzip.open, ".xz": lzma.open, ".bz2": bz2.open}


# ── Helpers ─────────────────────────────────────────────────────


def filename_from_url(url: str) -> str:
    """Last path segment of ``url``.

    Raises:
        UpdateError: If the URL path has no filename.
    """
    name = PurePosixPath(urlparse(url).path).name
    if not name:
        raise UpdateError(f"Update URL has no filename: {url}")
    return name


def expected_digest(path: Path) -> str:
    """The digest embedded in an archive name (``<digest>.tar.zst``).

    Raises:
        IntegrityError: If the name does not start with a SHA-256 digest.
    """
    digest = path.name.split(".", 1)[0].lower()
    if not _SHA256_HEX.match(digest):
        raise IntegrityError(f"Archive name carries no SHA-256 digest: {path.name}")
    return digest


def _intermediate_path(archive: Path) -> Path:
    """``abc.tar.zst`` → ``abc.tar``, ``abc.tgz`` → ``abc.tar``."""
    if archive.suffix == ".tgz":
        return archive.with_suffix(".tar")
    stem = archive.with_suffix("")
    if stem.suffix != ".tar":
        stem = stem.with_name(stem.name + ".tar")
    return stem


# ── Stage 1: download ───────────────────────────────────────────


def download_update(url: str, directory: Path, *, timeout: float = 30) -> Path:
    """Download the archive at ``url`` into ``directory``.

    The filename is taken from the final URL after redirects.  A
    partially written file is removed when the transfer fails.

    Raises:
        UpdateError: On transport failure or a URL without a filename.
    """
    logger.info("Downloading new database '%s'", url)

    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    target: Path | None = None
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            target = directory / filename_from_url(resp.geturl())
            logger.info("Saving new database at '%s'", target)
            with open(target, "wb") as out:
                shutil.copyfileobj(resp, out)
                size = out.tell()
        logger.info("File size: %d", size)
        return target
    except (OSError, ValueError, http.client.HTTPException) as e:
        # URLError and HTTPError are OSError subclasses
        if target is not None:
            target.unlink(missing_ok=True)
        raise UpdateError(f"Download failed: {url}: {e}") from e


# ── Stage 2: verify ─────────────────────────────────────────────


def verify_update(archive: Path) -> None:
    """Check the archive against the digest in its filename.

    On mismatch the archive is deleted so it can never be installed.

    Raises:
        IntegrityError: Missing digest or digest mismatch.
    """
    try:
        expected = expected_digest(archive)
        actual = calculate_hash(archive)
        if actual != expected:
            raise IntegrityError(
                f"Digest mismatch for {archive.name}: got {actual}"
            )
    except IntegrityError:
        archive.unlink(missing_ok=True)
        raise

    logger.info("Verified %s", archive.name)


# ── Stage 3: install ────────────────────────────────────────────


def decompress_update(archive: Path, target: Path) -> Path:
    """Decompress ``archive`` into the plain tar file ``target``.

    Raises:
        UpdateError: Unknown compression or corrupt stream.
    """
    suffix = archive.suffix.lower()
    if suffix not in _ZSTD_SUFFIXES and suffix not in _STDLIB_OPENERS:
        raise UpdateError(f"Unsupported archive format: {archive.name}")

    try:
        with open(target, "wb") as dst:
            if suffix in _ZSTD_SUFFIXES:
                with open(archive, "rb") as src:
                    zstandard.ZstdDecompressor().copy_stream(src, dst)
            else:
                with _STDLIB_OPENERS[suffix](archive, "rb") as src:
                    shutil.copyfileobj(src, dst)
    except (zstandard.ZstdError, OSError, EOFError, lzma.LZMAError) as e:
        target.unlink(missing_ok=True)
        raise UpdateError(f"Cannot decompress {archive.name}: {e}") from e

    return target


def _move_into(staging: Path, directory: Path) -> list[str]:
    """Move every regular file under ``staging`` to the same place in ``directory``."""
    moved: list[str] = []
    files = sorted(p for p in staging.rglob("*") if p.is_file() and not p.is_symlink())
    for source in files:
        relative = source.relative_to(staging)
        target = directory / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        source.replace(target)
        moved.append(relative.as_posix())
    return moved


def extract_update(tar_path: Path, directory: Path) -> list[str]:
    """Unpack a plain tar archive over ``directory``.

    The whole archive is extracted into a hidden staging folder inside
    ``directory`` first, with tarfile's ``data`` filter (no absolute
    paths, no ``..`` escapes, no device files).  Installed files are
    replaced only once every member extracted cleanly.

    Raises:
        UpdateError: Corrupt archive or unsafe member.
    """
    try:
        with tempfile.TemporaryDirectory(prefix=".staging-", dir=directory) as staging:
            with tarfile.open(tar_path, "r:") as tar:
                tar.extractall(staging, filter="data")
            names = _move_into(Path(staging), directory)
    except (tarfile.TarError, OSError) as e:
        raise UpdateError(f"Cannot unpack {tar_path.name}: {e}") from e

    logger.info("Installed %d files into %s", len(names), directory)
    return names


def install_update(archive: Path, directory: Path) -> list[str]:
    """Decompress and unpack a verified archive, then clean up.

    The archive and the intermediate tar are removed whether or not
    the install succeeded.
    """
    intermediate = directory / _intermediate_path(archive).name
    try:
        decompress_update(archive, intermediate)
        return extract_update(intermediate, directory)
    finally:
        intermediate.unlink(missing_ok=True)
        archive.unlink(missing_ok=True)


# ── Orchestration ───────────────────────────────────────────────


class CatalogUpdater:
    """Runs the download → verify → install pipeline once."""

    def __init__(self, url: str, directory: Path, *, timeout: float = 30):
        if not url:
            raise UpdateError("No update URL configured")
        self.url = url
        self.directory = directory
        self.timeout = timeout

    def run(self) -> list[str]:
        """Execute all stages and return the installed file names."""
        archive = download_update(self.url, self.directory, timeout=self.timeout)
        verify_update(archive)
        return install_update(archive, self.directory)
