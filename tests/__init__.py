"""
Shared sample diffs and helpers for the coreview tests.
"""

import sys
from pathlib import Path
from typing import Iterable, List

# Add src to path for imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "src"))

from coreview.stream import StreamToken  # noqa: E402

# Three hunks in src/api.py, one in README.md, a binary file and a pure rename.
# Blank context lines are a single space, as git writes them.
SAMPLE_DIFF = "\n".join(
    [
        "diff --git a/src/api.py b/src/api.py",
        "index 1111111..2222222 100644",
        "--- a/src/api.py",
        "+++ b/src/api.py",
        "@@ -10,5 +10,8 @@ def handler(request):",
        '     user_id = request.args.get("id")',
        "-    if user_id:",
        "-        return lookup(user_id)",
        "+    if not user_id:",
        '+        raise BadRequest("missing id")',
        "+    if not user_id.isdigit():",
        '+        raise BadRequest("bad id")',
        "+    return lookup(int(user_id))",
        " ",
        " def lookup(user_id):",
        "@@ -40,3 +43,4 @@ def lookup(user_id):",
        "     row = db.get(user_id)",
        '+    log.debug("lookup %s", user_id)',
        "     return row",
        " ",
        "@@ -60,2 +64,1 @@ class Legacy:",
        "-    # legacy",
        "     pass",
        "diff --git a/README.md b/README.md",
        "index 5555555..6666666 100644",
        "--- a/README.md",
        "+++ b/README.md",
        "@@ -1,2 +1,2 @@",
        "-# Old title",
        "+# New title",
        " ",
        "diff --git a/logo.png b/logo.png",
        "index 3333333..4444444 100644",
        "Binary files a/logo.png and b/logo.png differ",
        "diff --git a/old_name.py b/new_name.py",
        "similarity index 100%",
        "rename from old_name.py",
        "rename to new_name.py",
        "",
    ]
)

# A plain (non-git) unified diff with two files
PLAIN_DIFF = "\n".join(
    [
        "--- a/one.txt\t2024-01-01 00:00:00",
        "+++ b/one.txt\t2024-01-02 00:00:00",
        "@@ -1,2 +1,2 @@",
        "-alpha",
        "+ALPHA",
        " beta",
        "--- a/two.txt",
        "+++ b/two.txt",
        "@@ -3 +3,2 @@",
        " gamma",
        "+delta",
        "",
    ]
)


def literal(tokens: Iterable[StreamToken]) -> str:
    """Join tokens back into the text they came from."""
    return "".join(token.literal for token in tokens)


def chunked(text: str, cuts: Iterable[int]) -> List[str]:
    """Split *text* at the given offsets."""
    pieces = []
    last = 0
    for cut in sorted(set(cuts)):
        pieces.append(text[last:cut])
        last = cut
    pieces.append(text[last:])
    return pieces
