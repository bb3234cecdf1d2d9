"""
Catalog loader — reads program descriptors from a directory.

Each program lives in its own ``<id>.json`` file::

    database/
        nginx.json
        postgresql.json
        ...

Unlike best-effort config loading, a single malformed descriptor fails
the whole load: a corrupt catalog must never present half its data.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from assetinfo.core.errors import CatalogError
from assetinfo.core.models.program import Program

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIX = ".json"


def load_program(path: Path) -> Program:
    """Load a single program descriptor.

    Raises:
        CatalogError: If the file cannot be read or is not a valid Program.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read {path}: {e}") from e

    try:
        program = Program.model_validate_json(raw)
    except ValidationError as e:
        raise CatalogError(f"Invalid program descriptor {path}: {e}") from e

    logger.debug("Loaded program: %s from %s", program.info.id, path)
    return program


def descriptor_files(directory: Path) -> list[Path]:
    """Regular files directly in ``directory`` with the descriptor suffix.

    Symlinks are not followed, even when they point at a descriptor.
    """
    try:
        children = sorted(directory.iterdir())
    except OSError as e:
        raise CatalogError(f"Cannot read catalog directory {directory}: {e}") from e

    return [
        child for child in children
        if child.name.endswith(DESCRIPTOR_SUFFIX)
        and not child.is_symlink()
        and child.is_file()
    ]


def load_programs(directory: Path) -> list[Program]:
    """Load every descriptor in ``directory``.

    Raises:
        CatalogError: Unreadable directory, malformed descriptor, or two
            descriptors sharing a program id.
    """
    programs: list[Program] = []
    seen: dict[str, Path] = {}

    for path in descriptor_files(directory):
        program = load_program(path)
        if program.info.id in seen:
            raise CatalogError(
                f"Duplicate program id '{program.info.id}' in {path} "
                f"(already defined in {seen[program.info.id]})"
            )
        seen[program.info.id] = path
        programs.append(program)

    logger.info("Loaded %d programs from %s", len(programs), directory)
    return programs


def write_program(directory: Path, program: Program) -> Path:
    """Write ``program`` as ``<id>.json`` into ``directory``."""
    path = directory / f"{program.info.id}{DESCRIPTOR_SUFFIX}"
    path.write_text(program.model_dump_json(indent=2) + "\n", encoding="utf-8")
    logger.debug("Wrote program descriptor %s", path)
    return path
