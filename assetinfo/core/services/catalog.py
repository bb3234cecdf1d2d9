"""
Program catalog — the in-memory index of supported programs.

Rebuilt wholesale on every load.  Lookups hand out deep copies so
callers can never mutate the catalog through a returned Program.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from assetinfo.core.config.catalog_loader import load_programs
from assetinfo.core.models.program import Program


class ProgramCatalog:
    """All programs loaded from one catalog directory."""

    def __init__(self, path: Path, programs: list[Program]):
        self.path = path
        self._programs = tuple(programs)

    @classmethod
    def load(cls, path: Path) -> ProgramCatalog:
        """Load every descriptor in ``path``.

        Raises:
            CatalogError: If any descriptor is malformed.
        """
        return cls(path, load_programs(path))

    @property
    def programs(self) -> tuple[Program, ...]:
        return tuple(p.model_copy(deep=True) for p in self._programs)

    def get(self, name: str) -> Program | None:
        """Look up a program by exact id, then by case-insensitive title."""
        for program in self._programs:
            if program.info.id == name:
                return program.model_copy(deep=True)

        folded = name.casefold()
        for program in self._programs:
            if program.info.title.casefold() == folded:
                return program.model_copy(deep=True)

        return None

    def __len__(self) -> int:
        return len(self._programs)

    def __iter__(self) -> Iterator[Program]:
        return iter(self.programs)

    def __repr__(self) -> str:
        return f"<ProgramCatalog path={str(self.path)!r} programs={len(self)}>"
