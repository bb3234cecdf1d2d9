"""
Error taxonomy — every failure the core can report.

Inapplicable detection sources (missing binary, no matching container)
are NOT errors: they return ``None``.  Everything below means "this
source applies, but something went wrong".
"""

from __future__ import annotations


class AssetInfoError(Exception):
    """Base class for all assetinfo errors."""


# ── Extraction ──────────────────────────────────────────────────


class ExtractorError(AssetInfoError):
    """A detection source applied but could not produce a version."""


class RegexError(ExtractorError):
    """The version pattern does not compile."""


class VersionError(ExtractorError):
    """The version pattern did not match the raw text."""


class ParseError(ExtractorError):
    """A required capture group is missing or not a number."""


class ProcessError(ExtractorError):
    """Spawning, running, or elevating a binary failed.

    Carries the captured output so callers can surface it.
    """

    def __init__(self, message: str, *, output: str = "", returncode: int | None = None):
        super().__init__(message)
        self.output = output
        self.returncode = returncode


class DockerError(ExtractorError):
    """The container runtime could not be reached or queried."""


# ── Catalog ─────────────────────────────────────────────────────


class CatalogError(AssetInfoError):
    """The program catalog could not be loaded as a whole."""


class UpdateError(AssetInfoError):
    """A catalog update stage (download, decompress, unpack) failed."""


class IntegrityError(UpdateError):
    """The downloaded archive does not match the digest in its filename."""


# ── Lookups ─────────────────────────────────────────────────────


class HashDatabaseError(AssetInfoError):
    """A hash database backend failed to answer a query."""


class EndOfLifeError(AssetInfoError):
    """The end-of-life service request failed."""
