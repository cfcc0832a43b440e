from dataclasses import dataclass, field
from typing import List


@dataclass
class DiffSource:
    """Raw diff text plus optional commit subjects (narration context only)."""

    diff: str
    commit_messages: List[str] = field(default_factory=list)
