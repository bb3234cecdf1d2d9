"""
Docker adapter — list containers and their OCI version label.

Uses the docker CLI — never the Docker API directly.  Only the
container id, image name and ``org.opencontainers.image.version``
label are needed, so the list is requested in a tab-separated format.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field

from assetinfo.core.errors import DockerError

logger = logging.getLogger(__name__)

VERSION_LABEL = "org.opencontainers.image.version"

_PS_FORMAT = "{{.ID}}\t{{.Image}}\t{{.Label \"" + VERSION_LABEL + "\"}}"


@dataclass(frozen=True)
class ContainerSummary:
    """One row of ``docker ps -a``."""

    id: str
    image: str
    labels: dict[str, str] = field(default_factory=dict)


def run_docker(*args: str, timeout: float = 30) -> subprocess.CompletedProcess[str]:
    """Run a docker command and return the result."""
    return subprocess.run(
        ["docker", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def parse_container_list(output: str) -> list[ContainerSummary]:
    """Parse the tab-separated ``docker ps`` output, keeping row order."""
    containers: list[ContainerSummary] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t", 2)
        if len(parts) < 2:
            logger.debug("Skipping malformed docker ps line: %r", line)
            continue
        labels = {}
        if len(parts) == 3 and parts[2].strip():
            labels[VERSION_LABEL] = parts[2].strip()
        containers.append(ContainerSummary(id=parts[0], image=parts[1], labels=labels))
    return containers


def list_containers(*, timeout: float = 30) -> list[ContainerSummary]:
    """List all containers, running and stopped, in runtime order.

    Raises:
        DockerError: docker CLI missing, daemon unreachable, or timeout.
    """
    if shutil.which("docker") is None:
        raise DockerError("docker CLI not found on PATH")

    try:
        r = run_docker("ps", "-a", "--no-trunc", "--format", _PS_FORMAT, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise DockerError(f"docker ps timed out after {timeout}s") from e
    except OSError as e:
        raise DockerError(f"Cannot run docker: {e}") from e

    if r.returncode != 0:
        raise DockerError(r.stderr.strip() or "Docker daemon not available")

    containers = parse_container_list(r.stdout)
    logger.debug("docker ps returned %d containers", len(containers))
    return containers
