from .blocks import Block, BlockBuffer, BlockSnapshot
from .controller import (
    POLL_INTERVAL_SEC,
    ContinuousPlayback,
    PagedPlayback,
    PlaybackState,
    iter_tokens,
)

__all__ = [
    "Block",
    "BlockBuffer",
    "BlockSnapshot",
    "ContinuousPlayback",
    "POLL_INTERVAL_SEC",
    "PagedPlayback",
    "PlaybackState",
    "iter_tokens",
]
