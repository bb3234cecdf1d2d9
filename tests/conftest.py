"""
Shared test fixtures and configuration.
"""

import logging
import os
import stat
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from assetinfo.core.models import (
    BinaryExtractor,
    DockerExtractor,
    Program,
    ProgramInfo,
    Version,
    VersionedProgramInfo,
)

NGINX_REGEX = r"^nginx version: nginx/(?<version>(?<cycle>(?<major>\d+)\.(?<minor>\d+))\.(?<patch>\d+))"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's ASSETINFO_* settings out of every test."""
    for name in list(os.environ):
        if name.startswith("ASSETINFO_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo setup_logging() calls made by CLI and logging tests."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def nginx_regex() -> str:
    return NGINX_REGEX


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory that writes an executable shell script."""

    def _make(body: str, name: str = "testprogram") -> Path:
        path = tmp_path / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture
def nginx_program(tmp_path: Path) -> Program:
    """A catalog entry with one binary and one docker extractor."""
    return Program(
        info=ProgramInfo(id="nginx", title="nginx", endoflife_date_id="nginx"),
        binary=[
            BinaryExtractor(
                path=tmp_path / "bin" / "nginx",
                arguments=["-v"],
                regex=NGINX_REGEX,
            ),
        ],
        docker=DockerExtractor(
            image_name="nginx",
            regex=r"^(?<version>(?<cycle>(?<major>\d+)\.(?<minor>\d+))\.(?<patch>\d+))",
        ),
    )


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """A catalog directory with two descriptors."""
    from assetinfo.core.config.catalog_loader import write_program

    directory = tmp_path / "database"
    directory.mkdir()
    write_program(directory, Program(
        info=ProgramInfo(id="nginx", title="nginx", endoflife_date_id="nginx"),
        binary=[BinaryExtractor(
            path=tmp_path / "missing" / "nginx",
            arguments=["-v"],
            regex=NGINX_REGEX,
        )],
    ))
    write_program(directory, Program(
        info=ProgramInfo(id="com.mattermost.server", title="Mattermost"),
        docker=DockerExtractor(
            image_name="mattermost/mattermost",
            regex=r"^(?<version>(?<cycle>(?<major>\d+)\.(?<minor>\d+))\.(?<patch>\d+))",
        ),
    ))
    return directory


@pytest.fixture
def test_txt_info() -> VersionedProgramInfo:
    """Hash database record for a file containing ``test\\n``."""
    return VersionedProgramInfo(
        id="com.example.txt.test",
        title="test.txt",
        version=Version(string="1.0.0", cycle="1.0", major=1, minor=0, patch=0),
    )
