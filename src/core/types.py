"""Shared typed result models.

This module defines immutable results returned by the store, the
pipeline runner, and the query actions so interfaces stay explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class TableWriteResult:
    """Outcome of one table store write.

    Attributes:
        table_id: Fully-qualified ``catalog.namespace.tableName``.
        mode: Applied write mode, ``overwrite`` or ``append``.
        record_count: Rows written by this run.
        version: Table version created by the write.
        table_uri: Storage location of the table.
    """

    table_id: str
    mode: str
    record_count: int
    version: int
    table_uri: str


@dataclass(frozen=True)
class PipeRunResult:
    """Summary of one pipe execution."""

    pipe_name: str | None
    source_path: str
    file_type: str
    record_count: int
    written: bool
    write: TableWriteResult | None = None

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-safe summary."""
        payload: dict[str, object] = {
            "pipe": self.pipe_name,
            "sourcePath": self.source_path,
            "fileType": self.file_type,
            "recordCount": self.record_count,
            "written": self.written,
        }
        if self.write is not None:
            payload["table"] = self.write.table_id
            payload["writeMode"] = self.write.mode
            payload["version"] = self.write.version
        return payload


@dataclass(frozen=True)
class TableSummary:
    """One table discovered in the warehouse."""

    name: str
    namespace: str


@dataclass(frozen=True)
class TableVersion:
    """One entry of a table's version history."""

    version: int
    timestamp: datetime | None


@dataclass(frozen=True)
class TablePreview:
    """First rows of a table with stringified values."""

    schema: tuple[tuple[str, str], ...]
    rows: tuple[dict[str, str | None], ...] = field(default_factory=tuple)

    def to_payload(self) -> dict[str, object]:
        """Return the JSON result object for the preview action."""
        return {
            "schema": [{"name": name, "type": type_name} for name, type_name in self.schema],
            "rows": [dict(row) for row in self.rows],
            "rowCount": len(self.rows),
        }
