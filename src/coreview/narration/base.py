"""Capability interface for narration engines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator


class NarrationProvider(ABC):
    """Something that explains a diff as a stream of text chunks.

    Chunks have no framing: a marker may be split anywhere between two chunks.
    Transport failures are raised as ``NarrationError`` from the iterator.
    """

    name: str = ""

    @abstractmethod
    def stream(self, system_prompt: str, user_prompt: str, input_text: str) -> Iterator[str]:
        """Yield narration chunks in order until the engine is done."""
