"""
Program model — what a piece of software looks like and how to detect it.

Programs are loaded from catalog descriptors (one JSON file per program)
and carry zero or more extractors.  Extractors are a tagged union keyed
by ``kind`` so a single dispatch function can run any of them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class ProgramInfo(BaseModel):
    """Identity of a program inside the catalog."""

    id: str                               # stable machine key, unique per catalog
    title: str                            # display name, case-insensitive fallback key
    endoflife_date_id: str | None = None  # product id on endoflife.date


class BinaryExtractor(BaseModel):
    """Detect a version by running a local executable.

    ``regex`` must provide the named groups ``version``, ``cycle`` and
    ``major``; ``minor``, ``patch`` and ``extra`` are optional.
    """

    kind: Literal["binary"] = "binary"
    path: Path
    user: str | None = None               # run as this user via sudo
    arguments: list[str] = Field(default_factory=list)
    regex: str


class DockerExtractor(BaseModel):
    """Detect a version from the OCI version label of a container."""

    kind: Literal["docker"] = "docker"
    image_name: str                       # prefix matched against container images
    binary_path: Path | None = None
    arguments: list[str] | None = None
    regex: str


Extractor = Annotated[
    Union[BinaryExtractor, DockerExtractor],
    Field(discriminator="kind"),
]


class Program(BaseModel):
    """A catalog entry: identity plus detection methods."""

    info: ProgramInfo
    binary: list[BinaryExtractor] | None = None
    docker: DockerExtractor | None = None

    def extractors(self) -> list[BinaryExtractor | DockerExtractor]:
        """All detection methods, binaries first in declared order."""
        found: list[BinaryExtractor | DockerExtractor] = list(self.binary or [])
        if self.docker is not None:
            found.append(self.docker)
        return found

    @property
    def has_binary(self) -> bool:
        return bool(self.binary)

    @property
    def has_docker(self) -> bool:
        return self.docker is not None
