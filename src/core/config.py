"""Runtime configuration model for datachef.

This module owns all environment variable parsing and validation.
Other modules consume a typed settings object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_LOG_LEVEL, DEFAULT_WAREHOUSE, SUPPORTED_LOG_LEVELS
from core.errors import ConfigError


@dataclass(frozen=True)
class RuntimeSettings:
    """Validated process-level settings.

    Attributes:
        warehouse: Default table-store root when a pipe payload omits one.
        log_level: Minimum structured log level.
    """

    warehouse: str
    log_level: str

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        """Build settings from process environment variables.

        Returns:
            A validated settings object.

        Raises:
            ConfigError: If environment values are invalid.
        """
        warehouse_value = os.getenv("DATACHEF_WAREHOUSE", str(DEFAULT_WAREHOUSE))
        log_level_value = os.getenv("DATACHEF_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            warehouse=_resolve_warehouse(warehouse_value),
            log_level=parse_log_level(log_level_value),
        )


def parse_log_level(raw_value: str) -> str:
    """Parse and validate a log level name.

    Args:
        raw_value: Raw level string, case-insensitive.

    Returns:
        Normalized level name.

    Raises:
        ConfigError: If the level is not supported.
    """
    normalized_value = raw_value.strip().lower()
    if normalized_value == "warning":
        normalized_value = "warn"
    if normalized_value in SUPPORTED_LOG_LEVELS:
        return normalized_value
    supported_rows = ", ".join(SUPPORTED_LOG_LEVELS)
    raise ConfigError(
        f"Invalid DATACHEF_LOG_LEVEL value '{raw_value}'. Use one of: {supported_rows}."
    )


def _resolve_warehouse(raw_value: str) -> str:
    """Resolve local warehouse paths while keeping object-store URIs intact."""
    if "://" in raw_value:
        return raw_value.rstrip("/")
    return str(Path(raw_value).expanduser().resolve())
