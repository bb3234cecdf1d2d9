"""
Version parser — turn free-text tool output into a ``Version``.

Pure: no I/O, no subprocess.  Patterns come from catalog descriptors
and must provide the named groups ``version``, ``cycle`` and ``major``;
``minor``, ``patch`` and ``extra`` are optional.

Descriptors may spell named groups ``(?<name>...)``; that spelling is
rewritten to Python's ``(?P<name>...)`` before compiling.
"""

from __future__ import annotations

import logging
import re

from assetinfo.core.errors import ParseError, RegexError, VersionError
from assetinfo.core.models.version import Version

logger = logging.getLogger(__name__)

_REQUIRED_GROUPS = ("version", "cycle", "major")

# (?<name> but not the lookbehinds (?<= and (?<!
_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")


def compile_pattern(regex: str) -> re.Pattern[str]:
    """Compile a descriptor pattern.

    Raises:
        RegexError: If the pattern is malformed.
    """
    try:
        return re.compile(_NAMED_GROUP.sub("(?P<", regex), re.MULTILINE)
    except re.error as e:
        raise RegexError(f"Invalid version pattern {regex!r}: {e}") from e


def _to_int(name: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise ParseError(f"Capture group '{name}' is not a number: {value!r}") from e
    if number < 0:
        raise ParseError(f"Capture group '{name}' is negative: {value!r}")
    return number


def _optional_int(name: str, value: str | None) -> int | None:
    return None if value is None else _to_int(name, value)


def parse_version(raw_text: str, regex: str) -> Version:
    """Apply ``regex`` to ``raw_text`` and build a Version.

    Args:
        raw_text: Output of a version command or a label value.
        regex: Pattern with the named capture groups described above.

    Returns:
        The parsed Version.

    Raises:
        RegexError: The pattern does not compile.
        VersionError: The pattern did not match.
        ParseError: A required group is missing or a number is invalid.
    """
    logger.debug('Applying "%s" to "%s"', regex, raw_text)

    pattern = compile_pattern(regex)
    match = pattern.search(raw_text)
    if match is None:
        raise VersionError("Regex did not match")

    groups = match.groupdict()
    for name in _REQUIRED_GROUPS:
        if groups.get(name) is None:
            raise ParseError(f"Missing required capture group '{name}'")

    return Version(
        string=groups["version"],
        cycle=groups["cycle"],
        major=_to_int("major", groups["major"]),
        minor=_optional_int("minor", groups.get("minor")),
        patch=_optional_int("patch", groups.get("patch")),
        extra=groups.get("extra"),
    )
