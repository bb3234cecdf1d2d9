"""
Version model — a structured, comparable software version.

Versions are produced by the version parser and never mutated.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _level(value: int | None) -> tuple[int, int]:
    # None sorts before any number: 1 < 1.0 < 1.0.0
    return (0, 0) if value is None else (1, value)


class Version(BaseModel):
    """A parsed version.

    Ordering compares major → minor → patch numerically, with a missing
    component sorting before a present one.  Equality is stricter: every
    field, including ``string``, ``cycle`` and ``extra``, must match.
    """

    model_config = ConfigDict(frozen=True)

    string: str                       # full matched text, e.g. "1.18.0"
    cycle: str                        # release line, e.g. "1.18"
    major: int = Field(ge=0)
    minor: int | None = None
    patch: int | None = None
    extra: str | None = None          # pre-release / build suffix

    @property
    def sort_key(self) -> tuple[Any, ...]:
        return (self.major, _level(self.minor), _level(self.patch))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key <= other.sort_key

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key > other.sort_key

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key >= other.sort_key

    def __str__(self) -> str:
        return self.string
