#!/usr/bin/env python3
"""
coreview command line interface
"""

import logging
import os
import sys
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.text import Text

from coreview import __version__
from coreview.config import ReviewConfig
from coreview.errors import CoreviewError, DiffTooLargeError
from coreview.playback import Block
from coreview.reviewer import Reviewer

LOG_FILE = "logs/coreview.log"

app = typer.Typer(help="coreview - semantic code review tool", add_completion=False)

# Status lines go to stderr so stdout carries only the review itself
status_console = Console(stderr=True, highlight=False)


def configure_logging(enabled: bool) -> None:
    """Send coreview's own log records to logs/coreview.log when enabled."""
    if not enabled:
        logging.getLogger("coreview").addHandler(logging.NullHandler())
        return

    os.makedirs("logs", exist_ok=True)

    # Disable external library logging to prevent noise
    for noisy in ("httpx", "httpcore", "urllib3", "openai", "git"):
        logging.getLogger(noisy).setLevel(logging.CRITICAL)

    logging.basicConfig(level=logging.WARNING, handlers=[], force=True)

    app_logger = logging.getLogger("coreview")
    app_logger.setLevel(logging.DEBUG)
    app_logger.propagate = False
    app_logger.handlers.clear()

    handler = logging.FileHandler(LOG_FILE, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    app_logger.addHandler(handler)


def make_continue_prompt(console: Console):
    """Build the callback that pauses between blocks until Enter is pressed."""
    state = {"interactive": True}

    def wait_for_continue(block: Block) -> None:
        if not state["interactive"]:
            return
        label = f"files: {escape(', '.join(block.files))}" if block.files else "narration"
        try:
            console.input(f"\n[dim]── {label} ── press Enter to continue[/dim]")
        except EOFError:
            # stdin closed: keep going without pausing
            state["interactive"] = False

    return wait_for_continue


def print_status(message: str) -> None:
    status_console.print(message, markup=False)


@app.command()
def main(
    target: Optional[str] = typer.Argument(
        None, help="Branch, commit or range (e.g. main..HEAD). Omit to review local changes."
    ),
    pr: Optional[str] = typer.Option(None, "--pr", help="GitHub pull request URL to review."),
    raw: bool = typer.Option(False, "--raw", help="Emit markdown with fenced diff blocks instead of ANSI colors."),
    paged: Optional[bool] = typer.Option(
        None, "--paged/--continuous", help="Pause between blocks (default when stdout is a terminal)."
    ),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Narration provider name."),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name passed to the provider."),
    max_lines: Optional[int] = typer.Option(None, "--max-lines", min=1, help="Largest diff to review, in lines."),
    debug: bool = typer.Option(False, "--log", "-l", help="Enable debug logging to logs/coreview.log"),
    version: bool = typer.Option(False, "--version", "-v"),
):
    """Review a diff with a narrated, reference-expanded walkthrough.

    Examples:
      coreview              # local changes vs HEAD
      coreview main         # changes since main
      coreview main..HEAD   # explicit range
      coreview --pr https://github.com/org/repo/pull/42
    """
    if version:
        print(f"coreview v{__version__}")
        raise typer.Exit()

    load_dotenv()
    configure_logging(debug)

    config = ReviewConfig.from_env()
    if provider:
        config.provider = provider
    if model:
        config.model = model
    if max_lines:
        config.max_diff_lines = max_lines

    if paged is None:
        paged = sys.stdout.isatty() and sys.stdin.isatty()

    print_status("\n±coreview\n")
    reviewer = Reviewer(config, sink=sys.stdout, status=print_status)

    try:
        source = reviewer.load_source(target=target, pr_url=pr)
        wait_for_continue = make_continue_prompt(status_console) if paged else None
        reviewer.run(source, raw=raw, wait_for_continue=wait_for_continue)
    except DiffTooLargeError as e:
        status_console.print(Text(str(e), style="red"))
        status_console.print("Suggestions:")
        status_console.print("  - Review commits individually: coreview <commit>")
        status_console.print("  - Split into smaller PRs")
        raise typer.Exit(code=1)
    except CoreviewError as e:
        status_console.print(Text(str(e), style="red"))
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        raise typer.Exit(code=130)


if __name__ == "__main__":
    app()
