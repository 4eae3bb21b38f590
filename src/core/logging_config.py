"""Structured logging configuration.

This module builds an explicit structlog logger with a stable JSON format.
The pipeline entry point creates one instance and passes it to components.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping, TextIO

import structlog

from core.constants import DEFAULT_LOG_LEVEL

_LEVEL_NUMBERS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def build_logger(level: str = DEFAULT_LOG_LEVEL, stream: TextIO | None = None) -> Any:
    """Create a JSON-lines structlog logger.

    Each entry carries ``timestamp``, ``level`` and ``message`` keys plus
    any bound or call-site context fields.

    Args:
        level: Minimum level name (``debug``, ``info``, ``warn``, ``error``).
        stream: Output stream, stderr when omitted.

    Returns:
        A filtering structlog bound logger.
    """
    output = stream if stream is not None else sys.stderr
    return structlog.wrap_logger(
        structlog.PrintLogger(file=output),
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.add_log_level,
            _normalize_level_name,
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_LEVEL_NUMBERS[level]),
        cache_logger_on_first_use=False,
    )


def _normalize_level_name(
    _logger: Any,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Report warnings with the short ``warn`` level name."""
    if event_dict.get("level") == "warning":
        event_dict["level"] = "warn"
    return event_dict
