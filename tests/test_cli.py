from typing import Iterator, List, Optional

import pytest
from typer.testing import CliRunner

from coreview import __version__
from coreview.cli import app
from coreview.config import DEFAULT_MAX_DIFF_LINES, ReviewConfig
from coreview.errors import NarrationError
from coreview.narration import NarrationProvider, register_provider, unregister_provider
from coreview.reviewer import Reviewer
from coreview.sources import DiffSource
from tests import SAMPLE_DIFF

runner = CliRunner()

SCRIPT = ["The handler now validates ids ", "[[ref:src/api.py:hunk:1:L", "5]]", "\nDocs too [[ref:README.md]]"]


class ScriptedProvider(NarrationProvider):
    """Plays back a fixed narration and records what it was asked."""

    calls: List[tuple] = []
    failure: Optional[BaseException] = None

    def __init__(self, config: ReviewConfig):
        self.config = config

    def stream(self, system_prompt: str, user_prompt: str, input_text: str) -> Iterator[str]:
        ScriptedProvider.calls.append((system_prompt, user_prompt, input_text))
        yield from SCRIPT
        if ScriptedProvider.failure is not None:
            raise ScriptedProvider.failure


@pytest.fixture
def scripted(monkeypatch):
    register_provider("scripted")(ScriptedProvider)
    ScriptedProvider.calls = []
    ScriptedProvider.failure = None
    sources = {"diff": DiffSource(diff=SAMPLE_DIFF, commit_messages=["Validate ids"])}
    monkeypatch.setattr(Reviewer, "load_source", lambda self, target=None, pr_url=None: sources["diff"])
    yield sources
    unregister_provider("scripted")


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"coreview v{__version__}" in result.output


def test_raw_continuous_review(scripted) -> None:
    result = runner.invoke(app, ["--provider", "scripted", "--raw", "--continuous"])

    assert result.exit_code == 0, result.output
    assert "The handler now validates ids " in result.output
    assert "```diff\n--- a/src/api.py\n+++ b/src/api.py\n@@ -12,1 +11,4 @@\n" in result.output
    assert "+# New title" in result.output
    assert "[[ref:" not in result.output

    system_prompt, user_prompt, input_text = ScriptedProvider.calls[0]
    assert "[[ref:" in system_prompt
    assert user_prompt.endswith("- Validate ids")
    assert "[hunk:1] @@ -10,5 +10,8 @@ def handler(request):" in input_text


def test_paged_review_without_terminal_input(scripted) -> None:
    result = runner.invoke(app, ["--provider", "scripted", "--raw", "--paged"], input="")
    assert result.exit_code == 0, result.output
    assert "press Enter to continue" in result.output
    assert "Docs too " in result.output
    assert "+# New title" in result.output


def test_empty_diff(scripted) -> None:
    scripted["diff"] = DiffSource(diff="")
    result = runner.invoke(app, ["--provider", "scripted"])
    assert result.exit_code == 0
    assert "No changes to review." in result.output
    assert ScriptedProvider.calls == []


def test_diff_too_large(scripted) -> None:
    result = runner.invoke(app, ["--provider", "scripted", "--max-lines", "3"])
    assert result.exit_code == 1
    assert "Diff too large (19 lines, max 3)." in result.output
    assert "Review commits individually" in result.output
    assert ScriptedProvider.calls == []


def test_narration_failure_exits_nonzero(scripted) -> None:
    ScriptedProvider.failure = NarrationError("engine crashed")
    result = runner.invoke(app, ["--provider", "scripted", "--raw", "--continuous"])
    assert result.exit_code == 1
    assert "Docs too " in result.output
    assert "engine crashed" in result.output


@pytest.mark.parametrize("mode", ["--continuous", "--paged"])
def test_connection_drop_exits_cleanly(scripted, mode: str) -> None:
    ScriptedProvider.failure = ConnectionResetError("socket closed")
    result = runner.invoke(app, ["--provider", "scripted", "--raw", mode], input="")
    assert result.exit_code == 1
    assert not isinstance(result.exception, ConnectionResetError)
    assert "socket closed" in result.output


def test_unknown_provider(scripted) -> None:
    result = runner.invoke(app, ["--provider", "nosuch"])
    assert result.exit_code == 1
    assert "Unknown provider: nosuch" in result.output


def test_config_from_env() -> None:
    config = ReviewConfig.from_env(
        {
            "COREVIEW_PROVIDER": "openrouter",
            "COREVIEW_MODEL": "qwen/qwen3-coder",
            "COREVIEW_MAX_DIFF_LINES": "250",
            "GITHUB_TOKEN": "ghp_x",
            "OPENROUTER_API_KEY": "sk-or",
        }
    )
    assert config.provider == "openrouter"
    assert config.model == "qwen/qwen3-coder"
    assert config.max_diff_lines == 250
    assert config.github_token == "ghp_x"
    assert config.openrouter_api_key == "sk-or"
    assert config.openrouter_base_url == "https://openrouter.ai/api/v1"


def test_config_defaults() -> None:
    config = ReviewConfig.from_env({})
    assert config.provider == "claude"
    assert config.model is None
    assert config.max_diff_lines == DEFAULT_MAX_DIFF_LINES == 4000
    assert config.github_token is None


@pytest.mark.parametrize("value", ["lots", "-5", "0", ""])
def test_config_ignores_bad_line_limit(value: str) -> None:
    assert ReviewConfig.from_env({"COREVIEW_MAX_DIFF_LINES": value}).max_diff_lines == DEFAULT_MAX_DIFF_LINES
