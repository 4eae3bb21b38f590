"""Unit tests for the Lance table store."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pyarrow as pa
import pytest

from core.errors import StoreError
from core.pipe_types import Partitioning, StorageConfig, TableStoreConfig
from core.types import TableSummary
from store.table_store import TableStore
from store.write_mode import ResolvedWrite, WriteMode


def _store(tmp_path: Path, logger: Any) -> TableStore:
    config = TableStoreConfig(warehouse=str(tmp_path / "warehouse"), catalog="c")
    return TableStore(config, StorageConfig(), str(tmp_path / "unused"), logger)


def _destination(mode: WriteMode = WriteMode.REPLACE) -> ResolvedWrite:
    return ResolvedWrite(catalog="c", namespace="ns", table_name="events", mode=mode)


def _table() -> pa.Table:
    return pa.table({"id": [1, 2], "region": ["eu", None]})


def test_write_creates_first_version(tmp_path: Path, logger: Any) -> None:
    """First write should create the table at its warehouse location."""
    store = _store(tmp_path, logger)

    result = store.write(_table(), _destination())

    assert result.version == 1
    assert result.record_count == 2
    assert result.table_uri.endswith("c/ns/events.lance")


def test_append_adds_version_and_rows(tmp_path: Path, logger: Any) -> None:
    """Append should keep existing rows and add a version."""
    store = _store(tmp_path, logger)
    store.write(_table(), _destination())

    store.write(_table(), _destination(WriteMode.APPEND))

    preview = store.preview("events", "ns", limit=10)
    assert preview.to_payload()["rowCount"] == 4
    assert [item.version for item in store.list_versions("events", "ns")] == [1, 2]


def test_preview_stringifies_values(tmp_path: Path, logger: Any) -> None:
    """Preview rows should hold strings and keep nulls."""
    store = _store(tmp_path, logger)
    store.write(_table(), _destination())

    payload = store.preview("events", "ns", limit=1).to_payload()

    assert payload["rows"] == [{"id": "1", "region": "eu"}]
    assert payload["schema"] == [
        {"name": "id", "type": "int64"},
        {"name": "region", "type": "string"},
    ]


def test_list_tables_returns_written_tables(tmp_path: Path, logger: Any) -> None:
    """Listing should report table names in the namespace."""
    store = _store(tmp_path, logger)
    store.write(_table(), _destination())

    assert store.list_tables("ns") == [TableSummary(name="events", namespace="ns")]


def test_list_tables_missing_namespace_is_empty(tmp_path: Path, logger: Any) -> None:
    """Unknown namespaces should list no tables."""
    assert _store(tmp_path, logger).list_tables("absent") == []


def test_preview_missing_table_raises(tmp_path: Path, logger: Any) -> None:
    """Previewing a table that was never written should fail."""
    with pytest.raises(StoreError):
        _store(tmp_path, logger).preview("absent", "ns", limit=5)


def test_write_rejects_unknown_partition_keys(tmp_path: Path, logger: Any) -> None:
    """Partition keys must name dataset columns."""
    partitioning = Partitioning(enabled=True, keys=("day",))

    with pytest.raises(StoreError, match="day"):
        _store(tmp_path, logger).write(_table(), _destination(), partitioning)


def test_default_catalog_applies_without_config(tmp_path: Path, logger: Any) -> None:
    """Store should fall back to the default catalog and warehouse."""
    store = TableStore(TableStoreConfig(), StorageConfig(), str(tmp_path), logger)

    assert store.catalog == "chef_catalog"
    assert store.table_uri("c", "ns", "t") == f"{tmp_path.resolve()}/c/ns/t.lance"
