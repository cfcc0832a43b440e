"""Turn resolved references into terminal (ANSI) or markdown text."""

from __future__ import annotations

import io
from typing import Iterable, List, Optional

from rich.console import Console
from rich.text import Text

from coreview.diff import DiffIndex, DiffLine, Hunk, LineKind
from coreview.stream import (
    REF_END,
    REF_START,
    LineRange,
    Malformed,
    NotFound,
    NotFoundReason,
    RefToken,
    Resolved,
    ResolvedReference,
    StreamToken,
    resolve_reference,
    slice_hunk,
)

INDENT = "  "

LINE_STYLES = {
    LineKind.ADDED: "green",
    LineKind.REMOVED: "red",
    LineKind.CONTEXT: "dim",
}

REASON_LABELS = {
    NotFoundReason.FILE_MISSING: "file not in diff",
    NotFoundReason.HUNK_MISSING: "hunk not found",
}


def to_ansi(text: Text) -> str:
    """Render a rich Text to a string of ANSI escapes, without wrapping."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        force_terminal=True,
        color_system="standard",
        soft_wrap=True,
        highlight=False,
        emoji=False,
    )
    console.print(text, end="")
    return buffer.getvalue()


def _file_banner(path: str) -> Text:
    return Text.assemble("\n", INDENT, (f"── {path} ──", "dim"), "\n")


def _styled_lines(header: str, lines: Iterable[DiffLine]) -> Text:
    text = Text.assemble(INDENT, (header, "dim"), "\n")
    for line in lines:
        text.append(INDENT)
        text.append(line.to_patch_line(), style=LINE_STYLES[line.kind])
        text.append("\n")
    return text


def _fenced(path: str, body: List[str]) -> str:
    patch = [f"--- a/{path}", f"+++ b/{path}", *body]
    return "\n```diff\n" + "\n".join(patch) + "\n```\n"


def render_hunks(
    path: str,
    hunks: Iterable[Hunk],
    raw: bool = False,
    line_range: Optional[LineRange] = None,
) -> str:
    """Render *hunks* of *path*, sliced to *line_range* when one hunk is given."""
    hunks = tuple(hunks)

    if line_range is not None and len(hunks) == 1:
        part = slice_hunk(hunks[0], line_range)
        sections = [(part.header, part.lines)]
    else:
        sections = [(hunk.header, hunk.lines) for hunk in hunks]

    if raw:
        body: List[str] = []
        for header, lines in sections:
            body.append(header)
            body.extend(line.to_patch_line() for line in lines)
        return _fenced(path, body)

    text = _file_banner(path)
    for header, lines in sections:
        text.append_text(_styled_lines(header, lines))
    return to_ansi(text)


def render_warning(path: str, reason: NotFoundReason, raw: bool = False) -> str:
    message = f"[warning: {path} - {REASON_LABELS[reason]}]"
    if raw:
        return f"\n> {message}\n"
    return to_ansi(Text.assemble("\n", INDENT, (message, "yellow"), "\n"))


def render_reference(resolved: ResolvedReference, raw: bool = False) -> str:
    """Render the outcome of ``resolve_reference``.

    Malformed references come back as the literal marker so the reader still
    sees what the narrator wrote.
    """
    if isinstance(resolved, Resolved):
        return render_hunks(resolved.path, resolved.hunks, raw=raw, line_range=resolved.line_range)
    if isinstance(resolved, NotFound):
        return render_warning(resolved.path, resolved.reason, raw=raw)
    if isinstance(resolved, Malformed):
        return f"{REF_START}{resolved.raw_text}{REF_END}"
    raise TypeError(f"Unknown resolution outcome: {resolved!r}")


def render_token(token: StreamToken, index: DiffIndex, raw: bool = False) -> str:
    """Prose passes through; references are resolved against *index* and rendered."""
    if isinstance(token, RefToken):
        return render_reference(resolve_reference(token.content, index), raw=raw)
    return token.content
