"""
Shell command adapter — run a local binary and capture its output.

Privilege handling is an explicit strategy resolved once per extractor:
``RunDirect`` executes the binary as the current user, ``RunAsUser``
wraps it in ``sudo -u <user>``.  Building the argv is separate from
running it so the elevation command can be tested without executing.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from assetinfo.core.errors import ProcessError

logger = logging.getLogger(__name__)

SUDO = "/usr/bin/sudo"


@dataclass(frozen=True)
class RunDirect:
    """Execute the binary as the invoking user."""

    def command(self, path: Path, arguments: list[str]) -> list[str]:
        return [str(path), *arguments]


@dataclass(frozen=True)
class RunAsUser:
    """Execute the binary as another user through sudo."""

    user: str
    sudo: str = SUDO

    def command(self, path: Path, arguments: list[str]) -> list[str]:
        return [self.sudo, "-u", self.user, str(path), *arguments]


ExecutionStrategy = RunDirect | RunAsUser


def resolve_strategy(user: str | None) -> ExecutionStrategy:
    """Pick the execution strategy for an optional target user."""
    if user:
        return RunAsUser(user=user)
    return RunDirect()


@dataclass(frozen=True)
class CommandOutput:
    """Captured result of a finished command."""

    argv: list[str]
    returncode: int
    stdout: str
    stderr: str
    duration_ms: int = 0

    @property
    def text(self) -> str:
        """stdout, or stderr when stdout is empty.

        Many tools print ``--version`` output on stderr.
        """
        return self.stdout if self.stdout else self.stderr

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(argv: list[str], *, timeout: float = 30) -> CommandOutput:
    """Run ``argv`` and capture stdout/stderr.

    Args:
        argv: Full command line, program first.
        timeout: Seconds before the process is killed.

    Returns:
        CommandOutput for any exit status.

    Raises:
        ProcessError: If the process cannot be spawned or times out.
    """
    logger.info("Running %s", argv)
    start = time.monotonic()

    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ProcessError(f"Command timed out after {timeout}s: {argv[0]}") from e
    except OSError as e:
        raise ProcessError(f"Cannot execute {argv[0]}: {e}") from e

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.debug("Command %s exited with %d (%dms)", argv[0], result.returncode, elapsed_ms)

    return CommandOutput(
        argv=list(argv),
        returncode=result.returncode,
        stdout=result.stdout.decode("utf-8", errors="replace"),
        stderr=result.stderr.decode("utf-8", errors="replace"),
        duration_ms=elapsed_ms,
    )


def run_binary(
    path: Path,
    arguments: list[str],
    *,
    strategy: ExecutionStrategy | None = None,
    timeout: float = 30,
) -> str:
    """Run a binary through ``strategy`` and return its output text.

    Raises:
        ProcessError: Spawn failure, timeout, or non-zero exit status.
            A failed sudo elevation surfaces here as a non-zero exit.
    """
    strategy = strategy or RunDirect()
    output = run_command(strategy.command(path, arguments), timeout=timeout)

    if not output.ok:
        text = output.text.strip()
        raise ProcessError(
            text or f"{path} exited with code {output.returncode}",
            output=output.text,
            returncode=output.returncode,
        )

    return output.text
