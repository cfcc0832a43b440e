import pytest

from coreview.diff import (
    DiffIndex,
    LineKind,
    count_diff_lines,
    count_lines,
    enrich_diff,
    parse_diff,
    parse_hunk_header,
    strip_markers,
)
from tests import PLAIN_DIFF, SAMPLE_DIFF


def test_files_indexed_in_patch_order(sample_index: DiffIndex) -> None:
    assert list(sample_index) == ["src/api.py", "README.md", "logo.png", "new_name.py"]


def test_hunk_ordinals_are_per_file(sample_index: DiffIndex) -> None:
    assert [h.ordinal for h in sample_index["src/api.py"].hunks] == [1, 2, 3]
    assert [h.ordinal for h in sample_index["README.md"].hunks] == [1]


def test_files_without_hunks_are_kept(sample_index: DiffIndex) -> None:
    assert sample_index["logo.png"].hunks == ()
    assert sample_index["new_name.py"].hunks == ()


def test_line_classification(sample_index: DiffIndex) -> None:
    hunk = sample_index["src/api.py"].hunk(1)
    kinds = [line.kind for line in hunk.lines]
    assert kinds[:3] == [LineKind.CONTEXT, LineKind.REMOVED, LineKind.REMOVED]
    assert kinds[3:8] == [LineKind.ADDED] * 5
    assert kinds[8:] == [LineKind.CONTEXT, LineKind.CONTEXT]
    # Prefix byte is stripped
    assert hunk.lines[1].content == "    if user_id:"
    assert hunk.lines[8].content == ""


def test_header_kept_verbatim(sample_index: DiffIndex) -> None:
    hunk = sample_index["src/api.py"].hunk(2)
    assert hunk.header == "@@ -40,3 +43,4 @@ def lookup(user_id):"


def test_declared_counts_match_lines(sample_index: DiffIndex) -> None:
    for file_diff in sample_index.values():
        for hunk in file_diff.hunks:
            declared = parse_hunk_header(hunk.header)
            assert (declared.old_count, declared.new_count) == count_lines(hunk.lines)


def test_trailing_newline_does_not_add_context_line() -> None:
    index = parse_diff(PLAIN_DIFF + "\n\n")
    assert len(index["two.txt"].hunk(1).lines) == 2


def test_removed_line_that_looks_like_file_header() -> None:
    diff = "\n".join(
        [
            "diff --git a/notes.md b/notes.md",
            "--- a/notes.md",
            "+++ b/notes.md",
            "@@ -1,2 +1,1 @@",
            "--- a horizontal rule",
            " text",
        ]
    )
    hunk = parse_diff(diff)["notes.md"].hunk(1)
    assert hunk.lines[0].kind is LineKind.REMOVED
    assert hunk.lines[0].content == "-- a horizontal rule"


def test_lines_past_declared_counts_stay_in_hunk() -> None:
    diff = "diff --git a/a.txt b/a.txt\n@@ -1,1 +1,1 @@\n-a\n+b\n+c\n\n"
    hunk = parse_diff(diff)["a.txt"].hunk(1)
    # Prefixed lines extend the hunk; the trailing blank line does not
    assert [line.to_patch_line() for line in hunk.lines] == ["-a", "+b", "+c"]


def test_no_newline_marker_is_ignored() -> None:
    diff = "\n".join(
        [
            "diff --git a/a.txt b/a.txt",
            "@@ -1 +1 @@",
            "-old",
            "\\ No newline at end of file",
            "+new",
            "\\ No newline at end of file",
        ]
    )
    hunk = parse_diff(diff)["a.txt"].hunk(1)
    assert [line.content for line in hunk.lines] == ["old", "new"]


def test_plain_unified_diff() -> None:
    index = parse_diff(PLAIN_DIFF)
    assert list(index) == ["one.txt", "two.txt"]
    assert [line.content for line in index["two.txt"].hunk(1).lines] == ["gamma", "delta"]


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not a diff at all",
        "@@ -1,2 +1,2 @@\n+orphan hunk",
        "diff --git a/x b/x\n@@ garbage @@\n+line",
        "diff --git broken header",
    ],
)
def test_malformed_input_never_raises(raw: str) -> None:
    index = parse_diff(raw)
    assert isinstance(index, DiffIndex)


def test_header_without_counts_keeps_lines() -> None:
    index = parse_diff("diff --git a/x b/x\n@@ garbage @@\n+line\n context")
    assert [line.content for line in index["x"].hunk(1).lines] == ["line", "context"]


def test_index_is_read_only(sample_index: DiffIndex) -> None:
    with pytest.raises(TypeError):
        sample_index["other.py"] = sample_index["README.md"]  # type: ignore[index]


def test_enrich_inserts_hunk_markers(sample_index: DiffIndex) -> None:
    enriched = enrich_diff(sample_index)
    assert "── src/api.py ──" in enriched
    assert "[hunk:1] @@ -10,5 +10,8 @@ def handler(request):" in enriched
    assert "[hunk:3] @@ -60,2 +64,1 @@ class Legacy:" in enriched
    assert "+    return lookup(int(user_id))" in enriched


def test_enrich_round_trip(sample_index: DiffIndex) -> None:
    reparsed = parse_diff(strip_markers(enrich_diff(sample_index)))

    assert list(reparsed) == list(sample_index)
    for path, file_diff in sample_index.items():
        assert reparsed[path].hunks == file_diff.hunks


def test_enrich_round_trip_plain_diff() -> None:
    index = parse_diff(PLAIN_DIFF)
    assert parse_diff(strip_markers(enrich_diff(index))) == index


def test_count_diff_lines(sample_index: DiffIndex) -> None:
    assert count_diff_lines(sample_index) == 10 + 4 + 2 + 3


def test_parse_hunk_header_defaults_count_to_one() -> None:
    declared = parse_hunk_header("@@ -3 +4 @@")
    assert (declared.old_start, declared.old_count, declared.new_start, declared.new_count) == (3, 1, 4, 1)
    assert parse_hunk_header("not a header") is None
