"""Deliver rendered narration to an output sink, continuously or page by page."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional, TextIO

from coreview.diff import DiffIndex
from coreview.errors import NarrationError
from coreview.render import render_token
from coreview.stream import RefTokenizer, StreamToken

from .blocks import Block, BlockBuffer

logger = logging.getLogger(__name__)

# How long the consumer waits for the producer before re-checking
POLL_INTERVAL_SEC = 0.5

ContinueSignal = Callable[[Block], None]


def iter_tokens(chunks: Iterable[str], tokenizer: Optional[RefTokenizer] = None) -> Iterator[StreamToken]:
    """Run *chunks* through a tokenizer, flushing it once the chunks run out."""
    tokenizer = tokenizer or RefTokenizer()
    for chunk in chunks:
        yield from tokenizer.push(chunk)
    yield from tokenizer.flush()


class ContinuousPlayback:
    """Render and write every token as soon as the tokenizer releases it."""

    def __init__(self, index: DiffIndex, sink: TextIO, raw: bool = False):
        self.index = index
        self.sink = sink
        self.raw = raw

    def run(self, chunks: Iterable[str], on_first_chunk: Optional[Callable[[], None]] = None) -> None:
        """Consume the narration stream to the end.

        Raises:
            NarrationError: If the narration source fails
        """
        tokenizer = RefTokenizer()
        try:
            for token in iter_tokens(_notify_first(chunks, on_first_chunk), tokenizer):
                self._write(token)
        except NarrationError:
            # Text already received is shown before the failure surfaces
            self._flush(tokenizer)
            raise
        except Exception as e:
            logger.error(f"Narration stream failed: {e}")
            self._flush(tokenizer)
            raise NarrationError(str(e)) from e

    def _flush(self, tokenizer: RefTokenizer) -> None:
        for token in tokenizer.flush():
            self._write(token)

    def _write(self, token: StreamToken) -> None:
        self.sink.write(render_token(token, self.index, raw=self.raw))
        self.sink.flush()


class PlaybackState(Enum):
    FILLING = "filling"
    DONE = "done"


class PagedPlayback:
    """Show narration one block at a time while it keeps streaming in the background.

    A producer thread tokenizes, resolves and renders the narration into a
    BlockBuffer and never waits for the reader. The calling thread drains the
    current block to the sink and calls *wait_for_continue* before moving to
    the next block.
    """

    def __init__(
        self,
        index: DiffIndex,
        sink: TextIO,
        wait_for_continue: ContinueSignal,
        raw: bool = False,
        poll_interval: float = POLL_INTERVAL_SEC,
    ):
        self.index = index
        self.sink = sink
        self.wait_for_continue = wait_for_continue
        self.raw = raw
        self.poll_interval = poll_interval
        self.buffer = BlockBuffer()
        self.state = PlaybackState.FILLING
        self.block_index = 0
        self._producer: Optional[threading.Thread] = None

    def run(self, chunks: Iterable[str], on_first_chunk: Optional[Callable[[], None]] = None) -> None:
        """Play the whole stream.

        Raises:
            NarrationError: If the narration source fails; output buffered
                before the failure is still written first
        """
        self._producer = threading.Thread(
            target=self._produce,
            args=(_notify_first(chunks, on_first_chunk),),
            name="coreview-narration",
            daemon=True,
        )
        self._producer.start()
        try:
            self._consume()
        finally:
            self._producer.join(timeout=self.poll_interval)

    def _produce(self, chunks: Iterable[str]) -> None:
        tokenizer = RefTokenizer()
        try:
            for token in iter_tokens(chunks, tokenizer):
                self._append(token)
        except Exception as e:
            logger.error(f"Narration stream failed: {e}")
            for token in tokenizer.flush():
                self._append(token)
            self.buffer.finish(error=e)
        else:
            self.buffer.finish()

    def _append(self, token: StreamToken) -> None:
        block = self.buffer.append(token, render_token(token, self.index, raw=self.raw))
        logger.debug("Token -> block %d", block.index)

    def _consume(self) -> None:
        cursor = 0
        while self.state is PlaybackState.FILLING:
            snap = self.buffer.snapshot(self.block_index, cursor, timeout=self.poll_interval)
            if snap is None:
                continue

            for chunk in snap.new_chunks:
                self.sink.write(chunk)
            if snap.new_chunks:
                self.sink.flush()
                cursor += len(snap.new_chunks)

            if not snap.complete:
                continue

            if snap.finished and self.block_index >= len(self.buffer.blocks) - 1:
                self.state = PlaybackState.DONE
                if isinstance(snap.error, NarrationError):
                    raise snap.error
                if snap.error is not None:
                    raise NarrationError(str(snap.error)) from snap.error
                break

            logger.debug("Block %d drained, waiting to continue", self.block_index)
            self.wait_for_continue(snap.block)
            self.block_index += 1
            cursor = 0


def _notify_first(chunks: Iterable[str], callback: Optional[Callable[[], None]]) -> Iterator[str]:
    """Pass *chunks* through, calling *callback* just before the first one."""
    started = False
    for chunk in chunks:
        if not started:
            started = True
            if callback is not None:
                callback()
        yield chunk
