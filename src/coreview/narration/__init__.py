from pathlib import Path
from typing import Optional, Sequence

from .base import NarrationProvider
from .registry import (
    available_providers,
    get_provider,
    register_provider,
    unregister_provider,
)

# Importing the provider modules registers them
from . import claude, openrouter  # noqa: E402,F401

PROMPTS_DIR = Path(__file__).parent / "prompts"

USER_PROMPT = "Explain this diff:"


def load_prompt(prompt_name: str) -> str:
    """Load prompt from corresponding .txt file in prompts directory"""
    return (PROMPTS_DIR / f"{prompt_name}.txt").read_text(encoding="utf-8").strip()


def build_user_prompt(commit_messages: Optional[Sequence[str]] = None) -> str:
    """The fixed instruction, plus commit subjects as context when there are any."""
    if not commit_messages:
        return USER_PROMPT
    subjects = "\n".join(f"- {message}" for message in commit_messages)
    return f"{USER_PROMPT}\n\nCommit messages for context:\n{subjects}"


__all__ = [
    "NarrationProvider",
    "PROMPTS_DIR",
    "USER_PROMPT",
    "available_providers",
    "build_user_prompt",
    "get_provider",
    "load_prompt",
    "register_provider",
    "unregister_provider",
]
