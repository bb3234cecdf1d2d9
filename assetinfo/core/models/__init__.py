"""
Domain models — Pydantic types for assetinfo.

All models are re-exported here for convenient access:

    from assetinfo.core.models import Program, Version, FileScanResult
"""

from assetinfo.core.models.endoflife import CycleId, DateOrBool, Lts, ReleaseCycle
from assetinfo.core.models.program import (
    BinaryExtractor,
    DockerExtractor,
    Extractor,
    Program,
    ProgramInfo,
)
from assetinfo.core.models.scan import FileScanResult, VersionedProgramInfo
from assetinfo.core.models.version import Version

__all__ = [
    # endoflife.py
    "CycleId",
    "DateOrBool",
    "Lts",
    "ReleaseCycle",
    # program.py
    "BinaryExtractor",
    "DockerExtractor",
    "Extractor",
    "Program",
    "ProgramInfo",
    # scan.py
    "FileScanResult",
    "VersionedProgramInfo",
    # version.py
    "Version",
]
