"""
Info use case — detect installed versions of catalog programs.

Runs every extractor of a program and looks up the detected release
cycle on endoflife.date.  A failing extractor is reported in its own
row and never stops the program's other extractors, nor other programs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from assetinfo.core.errors import EndOfLifeError, ExtractorError
from assetinfo.core.models.endoflife import ReleaseCycle
from assetinfo.core.models.program import Program, ProgramInfo
from assetinfo.core.models.version import Version
from assetinfo.core.services.endoflife import EndOfLifeDateClient, support_status
from assetinfo.core.services.extractors import (
    DEFAULT_TIMEOUT,
    extract_version,
    extractor_name,
)

logger = logging.getLogger(__name__)


@dataclass
class Detection:
    """Outcome of one applicable extractor."""

    source: str                            # "Binary" / "Docker"
    version: Version | None = None
    error: str | None = None
    release_cycle: ReleaseCycle | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.version is not None

    def to_dict(self, today: date | None = None) -> dict:
        result: dict = {"source": self.source}
        if self.error:
            result["error"] = self.error
            return result
        if self.version is None:
            return result

        result["version"] = self.version.model_dump()
        if self.release_cycle is not None:
            status = support_status(self.release_cycle, today)
            result["release_cycle"] = self.release_cycle.model_dump(mode="json", by_alias=True)
            result["supported"] = status.supported
            result["eol_days"] = status.days
        return result


@dataclass
class ProgramReport:
    """All detections for one program."""

    info: ProgramInfo
    detections: list[Detection] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return any(d.ok for d in self.detections)

    @property
    def failed(self) -> bool:
        return any(d.error for d in self.detections)

    def to_dict(self, today: date | None = None) -> dict:
        return {
            "id": self.info.id,
            "title": self.info.title,
            "detections": [d.to_dict(today) for d in self.detections],
        }


def _lookup_cycle(
    client: EndOfLifeDateClient,
    info: ProgramInfo,
    version: Version,
) -> ReleaseCycle | None:
    if not info.endoflife_date_id:
        return None
    try:
        return client.get_release_cycle(info.endoflife_date_id, version.cycle)
    except EndOfLifeError as e:
        logger.warning("No end-of-life data for %s %s: %s", info.id, version.cycle, e)
        return None


def gather_program_info(
    program: Program,
    *,
    eol_client: EndOfLifeDateClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> ProgramReport:
    """Run all extractors of ``program``.

    Inapplicable extractors produce no row.  Extractor failures become
    rows with ``error`` set.

    Args:
        program: Catalog entry to inspect.
        eol_client: Optional end-of-life client; None skips EOL lookups.
        timeout: Per-command / per-request timeout in seconds.
    """
    report = ProgramReport(info=program.info)

    for extractor in program.extractors():
        source = extractor_name(extractor)
        try:
            version = extract_version(extractor, timeout=timeout)
        except ExtractorError as e:
            logger.error("%s (%s): %s", program.info.title, source, e)
            report.detections.append(Detection(source=source, error=str(e)))
            continue

        if version is None:
            continue

        logger.info("%s (%s) found in Version %s", program.info.title, source, version)
        cycle = _lookup_cycle(eol_client, program.info, version) if eol_client else None
        report.detections.append(Detection(source=source, version=version, release_cycle=cycle))

    return report


def gather_all(
    programs: list[Program] | tuple[Program, ...],
    *,
    eol_client: EndOfLifeDateClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[ProgramReport]:
    """``gather_program_info`` for every program, sorted by title."""
    ordered = sorted(programs, key=lambda p: p.info.title.casefold())
    return [
        gather_program_info(p, eol_client=eol_client, timeout=timeout)
        for p in ordered
    ]
