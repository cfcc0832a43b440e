"""Run configuration read from the environment (and a .env file, loaded by the CLI)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "claude"
DEFAULT_MAX_DIFF_LINES = 4000


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not an integer, using {default}")
        return default
    if parsed <= 0:
        logger.warning(f"Ignoring {name}={value!r}: must be positive, using {default}")
        return default
    return parsed


@dataclass
class ReviewConfig:
    """Settings for one review run.

    Attributes:
        provider: Registry key of the narration provider
        model: Provider-specific model name, None for the provider default
        max_diff_lines: Reject diffs with more hunk lines than this
        github_token: Sent when downloading pull request patches
        openrouter_api_key: Credential for the openrouter provider
        openrouter_base_url: OpenAI-compatible endpoint for the openrouter provider
    """

    provider: str = DEFAULT_PROVIDER
    model: Optional[str] = None
    max_diff_lines: int = DEFAULT_MAX_DIFF_LINES
    github_token: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ReviewConfig":
        env = os.environ if env is None else env
        return cls(
            provider=env.get("COREVIEW_PROVIDER") or DEFAULT_PROVIDER,
            model=env.get("COREVIEW_MODEL") or None,
            max_diff_lines=_int_env(env, "COREVIEW_MAX_DIFF_LINES", DEFAULT_MAX_DIFF_LINES),
            github_token=env.get("GITHUB_TOKEN") or None,
            openrouter_api_key=env.get("OPENROUTER_API_KEY") or None,
            openrouter_base_url=env.get("OPENROUTER_BASE_URL") or cls.openrouter_base_url,
        )
