from __future__ import annotations

import logging
import sys
from typing import Callable, Optional, TextIO

from coreview.config import ReviewConfig
from coreview.diff import DiffIndex, count_diff_lines, enrich_diff, parse_diff
from coreview.errors import DiffTooLargeError
from coreview.narration import NarrationProvider, build_user_prompt, get_provider, load_prompt
from coreview.playback import ContinuousPlayback, PagedPlayback
from coreview.playback.controller import ContinueSignal
from coreview.sources import DiffSource, read_git_diff, read_pr_diff

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]


def check_size(index: DiffIndex, limit: int) -> int:
    """Return the diff's line count.

    Raises:
        DiffTooLargeError: If it exceeds *limit*
    """
    line_count = count_diff_lines(index)
    logger.info(f"Diff has {line_count} lines (limit {limit})")
    if line_count > limit:
        raise DiffTooLargeError(line_count, limit)
    return line_count


class Reviewer:
    """Runs one narrated review: fetch diff, parse, narrate, play back."""

    def __init__(
        self,
        config: ReviewConfig,
        sink: Optional[TextIO] = None,
        status: Optional[StatusCallback] = None,
        provider: Optional[NarrationProvider] = None,
    ):
        self.config = config
        self.sink = sink or sys.stdout
        self.status = status or (lambda message: None)
        self._provider = provider

    @property
    def provider(self) -> NarrationProvider:
        if self._provider is None:
            self._provider = get_provider(self.config.provider, self.config)
        return self._provider

    def load_source(self, target: Optional[str] = None, pr_url: Optional[str] = None) -> DiffSource:
        if pr_url:
            return read_pr_diff(pr_url, token=self.config.github_token)
        return read_git_diff(".", target)

    def run(
        self,
        source: DiffSource,
        raw: bool = False,
        wait_for_continue: Optional[ContinueSignal] = None,
    ) -> bool:
        """Review *source*. Paged when *wait_for_continue* is given, continuous otherwise.

        Returns:
            False if there was nothing to review

        Raises:
            DiffTooLargeError: If the diff is over the configured ceiling
            NarrationError: If the narration engine fails
        """
        if not source.diff.strip():
            self.status("No changes to review.")
            return False

        self.status("Parsing the diff...")
        index = parse_diff(source.diff)
        check_size(index, self.config.max_diff_lines)

        enriched = enrich_diff(index)
        chunks = self.provider.stream(
            load_prompt("system_prompt"),
            build_user_prompt(source.commit_messages),
            enriched,
        )

        self.status("Analyzing changes...")

        def on_first_chunk() -> None:
            self.status("\nReview:\n")

        if wait_for_continue is None:
            playback = ContinuousPlayback(index, self.sink, raw=raw)
        else:
            playback = PagedPlayback(index, self.sink, wait_for_continue, raw=raw)
        playback.run(chunks, on_first_chunk=on_first_chunk)

        self.sink.write("\n")
        self.sink.flush()
        return True
