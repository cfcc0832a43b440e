"""Narration through the Claude Code CLI in headless streaming mode."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import sys
import threading
from typing import IO, Iterator, List, Optional

from coreview.config import ReviewConfig
from coreview.errors import NarrationError

from .base import NarrationProvider
from .registry import register_provider

logger = logging.getLogger(__name__)

CLAUDE_BINARY = "claude"
DEFAULT_MODEL = "opus"


def parse_stream_line(line: str) -> Optional[str]:
    """Return the text delta carried by one ``stream-json`` line, if any.

    With ``--include-partial-messages`` text arrives as
    ``{"type": "stream_event", "event": {"type": "content_block_delta",
    "delta": {"type": "text_delta", "text": "..."}}}``. Everything else
    (system messages, tool events, blank or broken lines) yields None.
    """
    if not line.strip():
        return None
    try:
        msg = json.loads(line)
    except json.JSONDecodeError:
        logger.debug(f"Skipping non-JSON line from claude: {line[:80]!r}")
        return None
    if not isinstance(msg, dict) or msg.get("type") != "stream_event":
        return None
    event = msg.get("event") or {}
    if event.get("type") != "content_block_delta":
        return None
    delta = event.get("delta") or {}
    if delta.get("type") != "text_delta":
        return None
    text = delta.get("text")
    return text if isinstance(text, str) else None


@register_provider("claude")
class ClaudeCodeProvider(NarrationProvider):
    """Runs ``claude -p`` and yields its streamed text deltas."""

    name = "claude"

    def __init__(self, config: ReviewConfig):
        self.model = config.model or DEFAULT_MODEL

    def build_command(self, system_prompt: str, user_prompt: str) -> List[str]:
        return [
            CLAUDE_BINARY,
            "-p",
            user_prompt,
            "--model",
            self.model,
            "--output-format",
            "stream-json",
            "--verbose",
            "--include-partial-messages",
            "--system-prompt",
            system_prompt,
        ]

    def stream(self, system_prompt: str, user_prompt: str, input_text: str) -> Iterator[str]:
        if shutil.which(CLAUDE_BINARY) is None:
            raise NarrationError(f"'{CLAUDE_BINARY}' was not found on PATH")

        command = self.build_command(system_prompt, user_prompt)
        logger.info(f"Starting {CLAUDE_BINARY} with model {self.model}")
        try:
            proc = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise NarrationError(f"Failed to start {CLAUDE_BINARY}: {e}") from e

        stderr_lines: List[str] = []
        writer = threading.Thread(target=_feed_stdin, args=(proc.stdin, input_text), daemon=True)
        reader = threading.Thread(target=_drain_stderr, args=(proc.stderr, stderr_lines), daemon=True)
        writer.start()
        reader.start()

        try:
            for line in proc.stdout:
                text = parse_stream_line(line)
                if text:
                    yield text
        except GeneratorExit:
            proc.kill()
            raise
        finally:
            return_code = proc.wait()
            writer.join()
            reader.join()

        logger.info(f"{CLAUDE_BINARY} exited with code {return_code}")
        if return_code != 0:
            details = "".join(stderr_lines).strip()
            message = f"{CLAUDE_BINARY} exited with code {return_code}"
            raise NarrationError(f"{message}:\n{details}" if details else message)


def _feed_stdin(stdin: IO[str], text: str) -> None:
    try:
        stdin.write(text)
    except BrokenPipeError:
        logger.warning("claude closed stdin before reading the whole diff")
    finally:
        try:
            stdin.close()
        except BrokenPipeError:
            pass


def _drain_stderr(stderr: IO[str], collected: List[str]) -> None:
    # Pass stderr through as it arrives and keep a copy for the error message
    for line in stderr:
        collected.append(line)
        sys.stderr.write(line)
