"""Parse unified diff text into an addressed DiffIndex.

Every file gets an entry (even with zero hunks) and every hunk gets a 1-based
ordinal within its file. Parsing never raises: anything unexpected is skipped
so partial or unusual patches degrade to fewer hunks.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .types import DiffIndex, DiffLine, FileDiff, Hunk, LineKind

logger = logging.getLogger(__name__)

_GIT_HEADER_RE = re.compile(r"^diff --git a/.+ b/(.+)$")
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_HUNK_MARKER_RE = re.compile(r"^\[hunk:\d+\] ")

FILE_BANNER = "── {path} ──"
_BANNER_RE = re.compile(r"^── (.+) ──$")


@dataclass(frozen=True)
class HunkRange:
    """Numbers declared by a ``@@ -a,b +c,d @@`` header."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int


def parse_hunk_header(header: str) -> Optional[HunkRange]:
    """Return the ranges declared by *header*, or None if it is not a range header.

    An omitted count means 1, as in ``@@ -3 +3 @@``.
    """
    m = _HUNK_HEADER_RE.match(header)
    if not m:
        return None
    return HunkRange(
        old_start=int(m.group(1)),
        old_count=int(m.group(2) or "1"),
        new_start=int(m.group(3)),
        new_count=int(m.group(4) or "1"),
    )


def count_lines(lines: Iterable[DiffLine]) -> Tuple[int, int]:
    """Return ``(old_count, new_count)`` for *lines*.

    Old side is removed + context, new side is added + context.
    """
    old_count = 0
    new_count = 0
    for line in lines:
        if line.kind is not LineKind.ADDED:
            old_count += 1
        if line.kind is not LineKind.REMOVED:
            new_count += 1
    return old_count, new_count


def _classify(line: str) -> Optional[DiffLine]:
    if line.startswith("+"):
        return DiffLine(LineKind.ADDED, line[1:])
    if line.startswith("-"):
        return DiffLine(LineKind.REMOVED, line[1:])
    if line.startswith(" ") or line == "":
        return DiffLine(LineKind.CONTEXT, line[1:])
    # "\ No newline at end of file" and anything else we don't understand
    return None


class _HunkBuilder:
    """Accumulates the body of one hunk while the parser walks the patch."""

    def __init__(self, ordinal: int, header: str):
        self.ordinal = ordinal
        self.header = header
        self.lines: List[DiffLine] = []
        declared = parse_hunk_header(header)
        # None means the header carried no usable counts; accept every body line
        self._old_left = declared.old_count if declared else None
        self._new_left = declared.new_count if declared else None

    @property
    def exhausted(self) -> bool:
        """True once the declared old/new counts have been consumed."""
        if self._old_left is None:
            return False
        return self._old_left <= 0 and self._new_left <= 0

    def add(self, diff_line: DiffLine) -> None:
        self.lines.append(diff_line)
        if self._old_left is not None:
            if diff_line.kind is not LineKind.ADDED:
                self._old_left -= 1
            if diff_line.kind is not LineKind.REMOVED:
                self._new_left -= 1

    def build(self) -> Hunk:
        return Hunk(ordinal=self.ordinal, header=self.header, lines=tuple(self.lines))


class _FileBuilder:
    def __init__(self, path: str):
        self.path = path
        self.hunks: List[Hunk] = []
        self.current: Optional[_HunkBuilder] = None

    def start_hunk(self, header: str) -> None:
        self.close_hunk()
        self.current = _HunkBuilder(len(self.hunks) + 1, header)

    def close_hunk(self) -> None:
        if self.current is not None:
            self.hunks.append(self.current.build())
            self.current = None

    def build(self) -> FileDiff:
        self.close_hunk()
        return FileDiff(path=self.path, hunks=tuple(self.hunks))


def _strip_side_prefix(path: str) -> str:
    path = path.split("\t", 1)[0].strip()
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def parse_diff(raw: str) -> DiffIndex:
    """Parse unified diff text (``git diff`` output or a plain patch) into a DiffIndex."""
    files: List[FileDiff] = []
    current: Optional[_FileBuilder] = None
    old_side_path: Optional[str] = None

    def finish() -> None:
        if current is not None:
            files.append(current.build())

    for line in raw.splitlines():
        hunk = current.current if current is not None else None
        in_body = hunk is not None and not hunk.exhausted

        if line.startswith("diff --git "):
            finish()
            m = _GIT_HEADER_RE.match(line)
            current = _FileBuilder(m.group(1) if m else "unknown")
            old_side_path = None
            continue

        if line.startswith("@@"):
            if current is None:
                logger.debug("Hunk header before any file marker: %r", line)
                continue
            current.start_hunk(line)
            continue

        # "---"/"+++" are file headers unless they fall inside a hunk body
        if not in_body and line.startswith("--- "):
            old_side_path = _strip_side_prefix(line[4:])
            continue
        if not in_body and line.startswith("+++ "):
            new_path = _strip_side_prefix(line[4:])
            if new_path == "/dev/null" and old_side_path:
                new_path = old_side_path
            # Plain patches have no "diff --git" line; a second file shows up
            # as a new ---/+++ pair after the previous file's hunks
            if current is None or current.hunks or current.current is not None:
                finish()
                current = _FileBuilder(new_path)
            continue

        if not in_body:
            # Past the declared counts, prefixed lines still extend the open
            # hunk; blank lines and anything unprefixed do not
            if hunk is None or not line.startswith(("+", "-", " ")):
                continue

        diff_line = _classify(line)
        if diff_line is not None:
            hunk.add(diff_line)

    finish()

    index = DiffIndex(files)
    logger.debug(
        "Parsed %d file(s), %d hunk(s)",
        len(index),
        sum(len(f.hunks) for f in index.values()),
    )
    return index


def enrich_diff(index: DiffIndex) -> str:
    """Re-serialize *index* with a ``[hunk:N]`` marker before every hunk header.

    This is the text handed to the narration engine so it can address hunks.
    """
    parts: List[str] = []
    for path, file_diff in index.items():
        parts.append(FILE_BANNER.format(path=path) + "\n")
        for hunk in file_diff.hunks:
            parts.append(f"[hunk:{hunk.ordinal}] {hunk.header}")
            parts.extend(line.to_patch_line() for line in hunk.lines)
            parts.append("")
    return "\n".join(parts)


def strip_markers(enriched: str) -> str:
    """Undo ``enrich_diff``: drop the hunk markers and turn banners back into file headers.

    The result parses to the same files, hunks and lines as the original diff.
    """
    out: List[str] = []
    for line in enriched.split("\n"):
        banner = _BANNER_RE.match(line)
        if banner:
            path = banner.group(1)
            out.append(f"diff --git a/{path} b/{path}")
            continue
        if line == "":
            continue
        out.append(_HUNK_MARKER_RE.sub("", line, count=1))
    return "\n".join(out)


def count_diff_lines(index: DiffIndex) -> int:
    """Total number of hunk body lines; callers compare it against a size ceiling."""
    return sum(len(hunk.lines) for f in index.values() for hunk in f.hunks)


__all__ = [
    "HunkRange",
    "count_diff_lines",
    "count_lines",
    "enrich_diff",
    "parse_diff",
    "parse_hunk_header",
    "strip_markers",
]
