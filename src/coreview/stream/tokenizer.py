"""Incremental extraction of ``[[ref:...]]`` markers from streamed narration text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Union

REF_START = "[[ref:"
REF_END = "]]"
MAX_REF_LENGTH = 200
FILE_SEPARATOR = ":hunk:"


@dataclass(frozen=True)
class TextToken:
    """Plain narration text."""

    content: str

    @property
    def literal(self) -> str:
        return self.content


@dataclass(frozen=True)
class RefToken:
    """A completed reference marker.

    ``content`` is the body between the delimiters; ``file`` is the text before
    the first ``:hunk:`` and is only used for grouping, not resolution.
    """

    content: str
    file: str

    @property
    def literal(self) -> str:
        """The marker exactly as it appeared in the stream."""
        return f"{REF_START}{self.content}{REF_END}"


StreamToken = Union[TextToken, RefToken]


def make_ref_token(body: str) -> RefToken:
    return RefToken(content=body, file=body.split(FILE_SEPARATOR, 1)[0])


class ScanState(Enum):
    SCANNING_PROSE = "scanning_prose"
    SCANNING_CANDIDATE = "scanning_candidate"


class RefTokenizer:
    """Stateful scanner fed with arbitrary chunks of narration.

    Delimiters may be split across chunks at any position. Text that could
    still turn out to be the start of ``[[ref:`` is held back until the next
    chunk decides it; a candidate marker that grows past ``MAX_REF_LENGTH``
    without ``]]`` is given up and its opening delimiter is emitted as prose.

    Usage:
        tokenizer = RefTokenizer()
        for chunk in chunks:
            handle(tokenizer.push(chunk))
        handle(tokenizer.flush())
    """

    def __init__(self, max_ref_length: int = MAX_REF_LENGTH):
        self.max_ref_length = max_ref_length
        self.state = ScanState.SCANNING_PROSE
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text buffered but not yet emitted."""
        return self._buffer

    def push(self, chunk: str) -> List[StreamToken]:
        """Feed one chunk and return the tokens it completed, in stream order."""
        tokens: List[StreamToken] = []
        self._buffer += chunk

        while self._buffer:
            if self.state is ScanState.SCANNING_PROSE:
                if not self._scan_prose(tokens):
                    break
            elif not self._scan_candidate(tokens):
                break

        return tokens

    def flush(self) -> List[StreamToken]:
        """Emit whatever is still buffered as prose. Call once at end of stream."""
        tokens: List[StreamToken] = []
        if self._buffer:
            tokens.append(TextToken(self._buffer))
            self._buffer = ""
        self.state = ScanState.SCANNING_PROSE
        return tokens

    def _scan_prose(self, tokens: List[StreamToken]) -> bool:
        """Handle the prose state. Returns False when more input is needed."""
        start = self._buffer.find(REF_START)
        if start == -1:
            # Keep a tail that might be the beginning of a split delimiter
            safe = max(0, len(self._buffer) - len(REF_START) + 1)
            if safe > 0:
                tokens.append(TextToken(self._buffer[:safe]))
                self._buffer = self._buffer[safe:]
            return False

        if start > 0:
            tokens.append(TextToken(self._buffer[:start]))
        self._buffer = self._buffer[start:]
        self.state = ScanState.SCANNING_CANDIDATE
        return True

    def _scan_candidate(self, tokens: List[StreamToken]) -> bool:
        """Handle the candidate state. Returns False when more input is needed."""
        # Only a "]]" inside the length bound counts, so the outcome does not
        # depend on how the text was chunked
        end = self._buffer.find(REF_END, len(REF_START), self.max_ref_length + 1)
        if end != -1:
            tokens.append(make_ref_token(self._buffer[len(REF_START) : end]))
            self._buffer = self._buffer[end + len(REF_END) :]
            self.state = ScanState.SCANNING_PROSE
            return True

        if len(self._buffer) > self.max_ref_length:
            # Unterminated marker: the delimiter was just text after all
            tokens.append(TextToken(REF_START))
            self._buffer = self._buffer[len(REF_START) :]
            self.state = ScanState.SCANNING_PROSE
            return True

        return False
