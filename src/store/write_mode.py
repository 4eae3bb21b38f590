"""Write-mode resolution for destination tables.

This module decides how a new dataset merges with its destination table
and assembles the fully-qualified ``catalog.namespace.tableName`` id.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.constants import DEFAULT_WRITE_MODE, WRITE_MODE_APPEND, WRITE_MODE_OVERWRITE
from core.errors import ConfigError, UnsupportedWriteModeError
from core.pipe_types import Output


class WriteMode(Enum):
    """Merge policy for persisting a dataset."""

    REPLACE = WRITE_MODE_OVERWRITE
    APPEND = WRITE_MODE_APPEND


@dataclass(frozen=True)
class ResolvedWrite:
    """Destination table and merge policy for one run."""

    catalog: str
    namespace: str
    table_name: str
    mode: WriteMode

    @property
    def table_id(self) -> str:
        """Fully-qualified ``catalog.namespace.tableName`` identifier."""
        return f"{self.catalog}.{self.namespace}.{self.table_name}"


def resolve_write_mode(output: Output) -> ResolvedWrite:
    """Resolve the destination identifier and write mode.

    Args:
        output: Pipe output descriptor.

    Returns:
        Resolved destination; an absent mode means replace.

    Raises:
        ConfigError: If catalog, namespace, or table name is empty.
        UnsupportedWriteModeError: If the mode is not overwrite or append.
    """
    missing = [
        name
        for name, value in (
            ("catalog", output.catalog),
            ("namespace", output.namespace),
            ("tableName", output.table_name),
        )
        if not value
    ]
    if missing or not output.catalog or not output.namespace or not output.table_name:
        raise ConfigError(
            f"Missing required output fields: {', '.join(missing)}. "
            "Set pipe.output.catalog, namespace and tableName."
        )
    return ResolvedWrite(
        catalog=output.catalog,
        namespace=output.namespace,
        table_name=output.table_name,
        mode=_parse_write_mode(output.write_mode),
    )


def _parse_write_mode(raw_mode: str | None) -> WriteMode:
    normalized_mode = (DEFAULT_WRITE_MODE if raw_mode is None else raw_mode).lower()
    for mode in WriteMode:
        if mode.value == normalized_mode:
            return mode
    raise UnsupportedWriteModeError(
        f"Unsupported write mode: '{raw_mode}'. Use '{WRITE_MODE_OVERWRITE}' "
        f"or '{WRITE_MODE_APPEND}'."
    )
