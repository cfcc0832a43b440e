"""Append-only block list shared by the narration producer and the output consumer."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from coreview.stream import RefToken, StreamToken


@dataclass
class Block:
    """One page of paged output.

    ``chunks`` only ever grows; the consumer keeps its own cursor into it.
    ``files`` lists the referenced paths in first-seen order.
    """

    index: int
    chunks: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.chunks)


@dataclass(frozen=True)
class BlockSnapshot:
    """What the consumer sees of one block at a point in time."""

    block: Block
    new_chunks: Tuple[str, ...]
    complete: bool  # no more text will be appended to this block
    finished: bool  # the producer has ended the whole stream
    error: Optional[BaseException] = None


class BlockBuffer:
    """Groups rendered tokens into blocks as they arrive.

    A new block starts when prose with at least one non-whitespace character
    follows one or more references. Whitespace-only prose never opens a block.
    All state is guarded by a single condition variable.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._blocks: List[Block] = []
        self._after_ref = False
        self._finished = False
        self._error: Optional[BaseException] = None

    @property
    def blocks(self) -> List[Block]:
        with self._cond:
            return list(self._blocks)

    @property
    def finished(self) -> bool:
        with self._cond:
            return self._finished

    def append(self, token: StreamToken, rendered: str) -> Block:
        """Add one token's rendered text, opening a new block when needed."""
        with self._cond:
            if isinstance(token, RefToken):
                block = self._current()
                self._after_ref = True
                if token.file not in block.files:
                    block.files.append(token.file)
            elif self._after_ref and token.content.strip():
                block = self._open_block()
                self._after_ref = False
            else:
                block = self._current()

            if rendered:
                block.chunks.append(rendered)
            self._cond.notify_all()
            return block

    def finish(self, error: Optional[BaseException] = None) -> None:
        """Mark the end of the stream, optionally with the error that ended it."""
        with self._cond:
            self._finished = True
            self._error = error
            self._cond.notify_all()

    def snapshot(self, index: int, cursor: int, timeout: Optional[float] = None) -> Optional[BlockSnapshot]:
        """Wait up to *timeout* for news about block *index* past *cursor* chunks.

        Returns None if the block does not exist yet and nothing changed.
        """
        with self._cond:
            if not self._has_news(index, cursor):
                self._cond.wait(timeout=timeout)

            if index >= len(self._blocks):
                if self._finished:
                    return BlockSnapshot(
                        block=Block(index=index),
                        new_chunks=(),
                        complete=True,
                        finished=True,
                        error=self._error,
                    )
                return None

            block = self._blocks[index]
            return BlockSnapshot(
                block=block,
                new_chunks=tuple(block.chunks[cursor:]),
                complete=self._finished or index < len(self._blocks) - 1,
                finished=self._finished,
                error=self._error,
            )

    def _has_news(self, index: int, cursor: int) -> bool:
        if self._finished or index < len(self._blocks) - 1:
            return True
        return index < len(self._blocks) and len(self._blocks[index].chunks) > cursor

    def _current(self) -> Block:
        if not self._blocks:
            return self._open_block()
        return self._blocks[-1]

    def _open_block(self) -> Block:
        block = Block(index=len(self._blocks))
        self._blocks.append(block)
        return block
