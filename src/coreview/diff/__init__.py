from .parser import (
    HunkRange,
    count_diff_lines,
    count_lines,
    enrich_diff,
    parse_diff,
    parse_hunk_header,
    strip_markers,
)
from .types import DiffIndex, DiffLine, FileDiff, Hunk, LineKind

__all__ = [
    # Model
    "DiffIndex",
    "DiffLine",
    "FileDiff",
    "Hunk",
    "LineKind",
    # Parsing
    "HunkRange",
    "count_diff_lines",
    "count_lines",
    "enrich_diff",
    "parse_diff",
    "parse_hunk_header",
    "strip_markers",
]
