"""Resolve reference addresses against a DiffIndex and slice hunks by line range.

Grammar of a reference body (the text between ``[[ref:`` and ``]]``)::

    path
    path:hunk:N
    path:hunk:N-M
    path:hunk:N:Lx
    path:hunk:N:Lx-Ly

Resolution is pure and total: the same body against the same index always
gives the same ResolvedReference, and nothing here raises for bad input.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from coreview.diff import DiffIndex, DiffLine, Hunk, count_lines, parse_hunk_header

logger = logging.getLogger(__name__)

CONTEXT_LINES = 2

_HUNK_REF_RE = re.compile(r"(.+):hunk:(\d+)(?:-(\d+))?(?::L(\d+)(?:-(\d+))?)?")


@dataclass(frozen=True)
class LineRange:
    """Inclusive, 1-based range of indices into ``Hunk.lines``."""

    start: int
    end: int


class NotFoundReason(Enum):
    FILE_MISSING = "file_missing"
    HUNK_MISSING = "hunk_missing"


@dataclass(frozen=True)
class Resolved:
    path: str
    hunks: Tuple[Hunk, ...]
    line_range: Optional[LineRange] = None


@dataclass(frozen=True)
class NotFound:
    path: str
    reason: NotFoundReason


@dataclass(frozen=True)
class Malformed:
    raw_text: str


ResolvedReference = Union[Resolved, NotFound, Malformed]


def resolve_reference(raw: str, index: DiffIndex) -> ResolvedReference:
    """Turn a reference body into hunks of *index*.

    Args:
        raw: Marker body, e.g. ``src/api.py:hunk:2:L5-9``
        index: The run's parsed diff

    Returns:
        Resolved, NotFound or Malformed; never raises
    """
    # An exact path wins even if it happens to contain ':'
    if raw in index:
        return Resolved(path=raw, hunks=index[raw].hunks)

    m = _HUNK_REF_RE.fullmatch(raw)
    if m is None:
        if not raw.strip() or raw != raw.strip() or ":" in raw:
            logger.debug("Malformed reference: %r", raw)
            return Malformed(raw_text=raw)
        return NotFound(path=raw, reason=NotFoundReason.FILE_MISSING)

    path = m.group(1)
    hunk_start = int(m.group(2))
    hunk_end = int(m.group(3)) if m.group(3) else hunk_start
    has_line_range = m.group(4) is not None

    if hunk_end < hunk_start:
        logger.debug("Malformed reference (descending hunk range): %r", raw)
        return Malformed(raw_text=raw)
    if has_line_range and hunk_end != hunk_start:
        # Line granularity needs exactly one hunk to drill into
        logger.debug("Malformed reference (line range over several hunks): %r", raw)
        return Malformed(raw_text=raw)

    file_diff = index.get(path)
    if file_diff is None:
        return NotFound(path=path, reason=NotFoundReason.FILE_MISSING)

    hunks: List[Hunk] = []
    for ordinal in range(hunk_start, hunk_end + 1):
        hunk = file_diff.hunk(ordinal)
        if hunk is None:
            # A partial result would hide the gap from the reader
            return NotFound(path=path, reason=NotFoundReason.HUNK_MISSING)
        hunks.append(hunk)

    line_range = None
    if has_line_range:
        line_start = int(m.group(4))
        line_end = int(m.group(5)) if m.group(5) else line_start
        line_range = LineRange(min(line_start, line_end), max(line_start, line_end))

    return Resolved(path=path, hunks=tuple(hunks), line_range=line_range)


@dataclass(frozen=True)
class HunkSlice:
    """A contiguous run of hunk lines plus the header that describes exactly them."""

    header: str
    lines: Tuple[DiffLine, ...]
    start: int  # 0-based offset of the first sliced line within the hunk


def slice_hunk(hunk: Hunk, line_range: LineRange, context: int = CONTEXT_LINES) -> HunkSlice:
    """Cut *line_range* out of *hunk*, widened by *context* lines on each side.

    Out-of-range numbers are clamped to the hunk. The returned header is a valid
    ``@@ -a,b +c,d @@`` for the sliced lines alone.
    """
    total = len(hunk.lines)
    start = max(1, min(line_range.start, total))
    end = max(start, min(line_range.end, total))

    slice_start = max(0, start - 1 - context)
    slice_end = min(total, end + context)
    lines = hunk.lines[slice_start:slice_end]

    return HunkSlice(
        header=build_slice_header(hunk, slice_start, lines),
        lines=lines,
        start=slice_start,
    )


def build_slice_header(hunk: Hunk, slice_start: int, lines: Tuple[DiffLine, ...]) -> str:
    declared = parse_hunk_header(hunk.header)
    old_origin = declared.old_start if declared else 0
    new_origin = declared.new_start if declared else 1

    skipped_old, skipped_new = count_lines(hunk.lines[:slice_start])
    old_count, new_count = count_lines(lines)

    return (
        f"@@ -{old_origin + skipped_old},{old_count} "
        f"+{new_origin + skipped_new},{new_count} @@"
    )
