"""Public API surface for gelflog."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from .config.loader import load_configuration
from .core.manager import GLOBAL_MANAGER
from .core.publisher import GLOBAL_STATS


def configure(overrides: Mapping[str, Any] | None = None) -> None:
    """Configure gelflog using the provided overrides."""

    config = load_configuration(overrides or {})
    GLOBAL_MANAGER.configure(config)


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the given name, configuring defaults on first use."""

    if not GLOBAL_MANAGER.configured:
        configure({})
    return GLOBAL_MANAGER.get_logger(name)


def shutdown() -> None:
    """Remove and close the handlers installed by :func:`configure`."""

    GLOBAL_MANAGER.shutdown()


def publish_stats() -> Dict[str, int]:
    """Return process-wide counts of published, fallback and dropped messages."""

    return GLOBAL_STATS.snapshot()
