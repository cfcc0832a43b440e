"""Narration through an OpenAI-compatible endpoint (OpenRouter by default)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Iterator, Optional

from openai import OpenAI, OpenAIError

from coreview.config import ReviewConfig
from coreview.errors import NarrationError

from .base import NarrationProvider
from .registry import register_provider

logger = logging.getLogger(__name__)


class ModelOptions(Enum):
    QWEN3_480B_A35B_CODER = "qwen/qwen3-coder"
    QWEN3_235B_A22B_INSTRUCT = "qwen/qwen3-235b-a22b-2507"
    QWEN3_30B_A3B_INSTRUCT = "qwen/qwen3-30b-a3b-instruct-2507"


def iter_deltas(events: Iterable[Any]) -> Iterator[str]:
    """Pull the text content out of streamed chat completion chunks."""
    for event in events:
        choices = getattr(event, "choices", None) or []
        if not choices:
            continue
        content = getattr(choices[0].delta, "content", None)
        if content:
            yield content


@register_provider("openrouter")
class OpenRouterProvider(NarrationProvider):
    """Streams a chat completion; the diff goes in the user message."""

    name = "openrouter"

    def __init__(self, config: ReviewConfig, client: Optional[OpenAI] = None):
        self.model = config.model or ModelOptions.QWEN3_480B_A35B_CODER.value
        self.temperature = 0.2
        if client is None:
            if not config.openrouter_api_key:
                raise NarrationError("OPENROUTER_API_KEY is not set")
            client = OpenAI(api_key=config.openrouter_api_key, base_url=config.openrouter_base_url)
        self.client = client

    def stream(self, system_prompt: str, user_prompt: str, input_text: str) -> Iterator[str]:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": f"{user_prompt}\n\n{input_text}"},
        ]
        logger.info(f"Requesting narration from {self.model}")
        try:
            events = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                stream=True,
            )
            yield from iter_deltas(events)
        except OpenAIError as e:
            raise NarrationError(f"Error calling {self.model}: {e}") from e
