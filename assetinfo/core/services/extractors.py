"""
Extractors — obtain a Version from one detection source.

Every extractor call has three outcomes:

    Version     the source applies and a version was found
    None        the source does not apply here (binary missing,
                no matching container) — skip silently
    raises      the source applies but failed (ExtractorError)

``extract_version`` is the single dispatch point over the tagged
``BinaryExtractor | DockerExtractor`` union.
"""

from __future__ import annotations

import logging

from assetinfo.adapters.containers import docker as docker_adapter
from assetinfo.adapters.shell.command import resolve_strategy, run_binary
from assetinfo.core.errors import ExtractorError
from assetinfo.core.models.program import BinaryExtractor, DockerExtractor
from assetinfo.core.models.version import Version
from assetinfo.core.services.version_parser import compile_pattern, parse_version

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def extractor_name(extractor: BinaryExtractor | DockerExtractor) -> str:
    """Display name of an extractor kind."""
    if isinstance(extractor, BinaryExtractor):
        return "Binary"
    if isinstance(extractor, DockerExtractor):
        return "Docker"
    raise TypeError(f"Unknown extractor: {type(extractor).__name__}")


def binary_version(
    extractor: BinaryExtractor,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> Version | None:
    """Run the extractor's binary and parse its output."""
    if not extractor.path.exists():
        logger.debug("Binary %s not present, skipping", extractor.path)
        return None

    strategy = resolve_strategy(extractor.user)
    text = run_binary(extractor.path, extractor.arguments, strategy=strategy, timeout=timeout)
    logger.info("Command executed: %s", extractor.path)

    return parse_version(text, extractor.regex)


def docker_version(
    extractor: DockerExtractor,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> Version | None:
    """Find the first container of ``image_name`` with a parseable version label."""
    compile_pattern(extractor.regex)
    containers = docker_adapter.list_containers(timeout=timeout)

    for container in containers:
        if not container.image.startswith(extractor.image_name):
            continue

        label = container.labels.get(docker_adapter.VERSION_LABEL)
        if label is None:
            continue

        try:
            return parse_version(label, extractor.regex)
        except ExtractorError as e:
            logger.debug(
                "Container %s label %r did not parse: %s", container.id[:12], label, e,
            )

    return None


def extract_version(
    extractor: BinaryExtractor | DockerExtractor,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> Version | None:
    """Run any extractor.

    Raises:
        ExtractorError: The source applies but detection failed.
    """
    if isinstance(extractor, BinaryExtractor):
        return binary_version(extractor, timeout=timeout)
    if isinstance(extractor, DockerExtractor):
        return docker_version(extractor, timeout=timeout)
    raise TypeError(f"Unknown extractor: {type(extractor).__name__}")
