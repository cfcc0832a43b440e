"""Narration stream handling: marker tokenizing and reference resolution."""

from .resolver import (
    CONTEXT_LINES,
    HunkSlice,
    LineRange,
    Malformed,
    NotFound,
    NotFoundReason,
    Resolved,
    ResolvedReference,
    build_slice_header,
    resolve_reference,
    slice_hunk,
)
from .tokenizer import (
    MAX_REF_LENGTH,
    REF_END,
    REF_START,
    RefToken,
    RefTokenizer,
    ScanState,
    StreamToken,
    TextToken,
    make_ref_token,
)

__all__ = [
    # Tokenizer
    "MAX_REF_LENGTH",
    "REF_END",
    "REF_START",
    "RefToken",
    "RefTokenizer",
    "ScanState",
    "StreamToken",
    "TextToken",
    "make_ref_token",
    # Resolver
    "CONTEXT_LINES",
    "HunkSlice",
    "LineRange",
    "Malformed",
    "NotFound",
    "NotFoundReason",
    "Resolved",
    "ResolvedReference",
    "build_slice_header",
    "resolve_reference",
    "slice_hunk",
]
