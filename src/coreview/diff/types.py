"""Addressed diff structure shared by the parser, resolver and renderer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Tuple


class LineKind(Enum):
    """Classification of one physical line inside a hunk body."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"

    @property
    def prefix(self) -> str:
        """The unified-diff prefix character for this kind."""
        return _PREFIXES[self]


_PREFIXES = {
    LineKind.CONTEXT: " ",
    LineKind.ADDED: "+",
    LineKind.REMOVED: "-",
}


@dataclass(frozen=True)
class DiffLine:
    kind: LineKind
    content: str

    def to_patch_line(self) -> str:
        return self.kind.prefix + self.content


@dataclass(frozen=True)
class Hunk:
    """A contiguous change region of one file.

    ``ordinal`` is the only external identity of a hunk (1-based, file order).
    ``lines`` is the sole source of truth when a sub-range is reconstructed.
    """

    ordinal: int
    header: str
    lines: Tuple[DiffLine, ...]


@dataclass(frozen=True)
class FileDiff:
    path: str
    hunks: Tuple[Hunk, ...] = ()

    def hunk(self, ordinal: int) -> Hunk | None:
        """Return the hunk with *ordinal*, or None when the file has no such hunk."""
        for hunk in self.hunks:
            if hunk.ordinal == ordinal:
                return hunk
        return None


class DiffIndex(Mapping[str, FileDiff]):
    """Read-only mapping of file path to FileDiff in patch order.

    Built once per run by ``parse_diff`` and never mutated afterwards.
    """

    def __init__(self, files: Iterable[FileDiff] = ()):
        self._files: Dict[str, FileDiff] = {}
        for file_diff in files:
            self._files[file_diff.path] = file_diff

    def __getitem__(self, path: str) -> FileDiff:
        return self._files[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"DiffIndex({list(self._files)!r})"
