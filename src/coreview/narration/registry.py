"""Explicit registry of narration providers, keyed by a validated name."""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List

from coreview.config import ReviewConfig
from coreview.errors import ProviderNotFoundError

from .base import NarrationProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ReviewConfig], NarrationProvider]

_NAME_RE = re.compile(r"[a-zA-Z]+")
_REGISTRY: Dict[str, ProviderFactory] = {}


def register_provider(name: str) -> Callable[[ProviderFactory], ProviderFactory]:
    """Decorator adding a provider factory under *name*.

    Usage:
        @register_provider("claude")
        class ClaudeCodeProvider(NarrationProvider): ...
    """
    if not _NAME_RE.fullmatch(name):
        raise ValueError(f"Invalid provider name: {name}")

    def decorator(factory: ProviderFactory) -> ProviderFactory:
        _REGISTRY[name] = factory
        return factory

    return decorator


def unregister_provider(name: str) -> None:
    _REGISTRY.pop(name, None)


def available_providers() -> List[str]:
    return sorted(_REGISTRY)


def get_provider(name: str, config: ReviewConfig) -> NarrationProvider:
    """Build the provider registered under *name*.

    Raises:
        ProviderNotFoundError: If *name* is invalid or not registered
    """
    if not _NAME_RE.fullmatch(name or ""):
        raise ProviderNotFoundError(f"Invalid provider name: {name!r}")
    factory = _REGISTRY.get(name)
    if factory is None:
        raise ProviderNotFoundError(
            f"Unknown provider: {name}. Valid options: {available_providers()}"
        )
    logger.info(f"Using narration provider: {name}")
    return factory(config)
