"""Unit tests for pipe orchestration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from core.config import RuntimeSettings
from core.errors import ConfigError, MissingExtractionConfigError, UnsupportedWriteModeError
from core.pipe_config import build_pipe_config
from core.pipe_types import (
    FieldExtraction,
    FilePattern,
    Output,
    Pipe,
    PipeConfig,
    RecordBoundary,
    RegexField,
    TableStoreConfig,
)
from ingest.pipeline import PipeRunner, run_pipe


def _settings(tmp_path: Path) -> RuntimeSettings:
    return RuntimeSettings(warehouse=str(tmp_path / "default-warehouse"), log_level="debug")


def _csv_payload(tmp_path: Path, write_mode: str | None = "overwrite") -> dict[str, Any]:
    output: dict[str, Any] = {"catalog": "c", "namespace": "ns", "tableName": "orders"}
    if write_mode is not None:
        output["writeMode"] = write_mode
    return {
        "pipe": {
            "id": "p-1",
            "name": "orders",
            "filePattern": {"extensions": ["csv"]},
            "recordBoundary": {"type": "delimited", "hasHeader": True},
            "output": output,
        },
        "sourcePath": str(tmp_path / "in"),
        "tableStore": {"warehouse": str(tmp_path / "warehouse"), "catalog": "c"},
    }


def _write_csv(tmp_path: Path) -> None:
    source_dir = tmp_path / "in"
    source_dir.mkdir(exist_ok=True)
    (source_dir / "orders.csv").write_text("id,total\n1,9.5\n2,3.0\n", encoding="utf-8")


def test_run_pipe_overwrite_then_append_creates_versions(tmp_path: Path, logger: Any) -> None:
    """Overwrite should create the table and append should add rows."""
    _write_csv(tmp_path)
    settings = _settings(tmp_path)

    first = run_pipe(build_pipe_config(_csv_payload(tmp_path)), settings, logger)
    second = run_pipe(build_pipe_config(_csv_payload(tmp_path, "APPEND")), settings, logger)

    assert first.written and first.write is not None
    assert first.write.table_id == "c.ns.orders"
    assert second.write is not None and second.write.mode == "append"
    assert second.write.version > first.write.version
    assert (tmp_path / "warehouse" / "c" / "ns" / "orders.lance").is_dir()


def test_run_pipe_overwrite_replaces_rows(tmp_path: Path, logger: Any) -> None:
    """Repeated overwrite should leave only the latest rows."""
    import lance

    _write_csv(tmp_path)
    settings = _settings(tmp_path)
    payload = _csv_payload(tmp_path, write_mode=None)

    run_pipe(build_pipe_config(payload), settings, logger)
    result = run_pipe(build_pipe_config(payload), settings, logger)

    assert result.write is not None
    assert lance.dataset(result.write.table_uri).count_rows() == 2


def test_run_pipe_empty_source_skips_write(tmp_path: Path, logger: Any, log_stream: Any) -> None:
    """A source without matching files should not write a table."""
    (tmp_path / "in").mkdir()

    result = run_pipe(build_pipe_config(_csv_payload(tmp_path)), _settings(tmp_path), logger)

    assert result.written is False
    assert result.record_count == 0
    assert not (tmp_path / "warehouse" / "c" / "ns" / "orders.lance").exists()
    assert "no_data_to_process" in log_stream.getvalue()


def test_run_pipe_text_source_extracts_fields(tmp_path: Path, logger: Any) -> None:
    """Text pipes should write one string column per extracted field."""
    source_dir = tmp_path / "logs"
    source_dir.mkdir()
    (source_dir / "app.log").write_text(
        "2024-01-01 ERROR boom\n2024-01-02 INFO ok\nnoise\n", encoding="utf-8"
    )
    extraction = FieldExtraction(
        fields=(RegexField(name="level", pattern=r"\w+ (\w+) .*", group=1),),
        on_error="skip",
    )
    pipe = Pipe(
        id="p-2",
        name="logs",
        description=None,
        file_pattern=FilePattern(extensions=("log",)),
        record_boundary=RecordBoundary(type="text", field_extraction=extraction),
        output=Output(table_name="logs", catalog="c", namespace="ns"),
    )
    config = PipeConfig(
        pipe=pipe,
        source_path=str(source_dir),
        table_store=TableStoreConfig(warehouse=str(tmp_path / "warehouse")),
    )

    result = run_pipe(config, _settings(tmp_path), logger)

    assert result.file_type == "text"
    assert result.record_count == 2


def test_run_pipe_rejects_write_mode_before_reading(tmp_path: Path, logger: Any) -> None:
    """Invalid write modes should fail before the missing source is touched."""
    payload = _csv_payload(tmp_path, write_mode="upsert")

    with pytest.raises(UnsupportedWriteModeError):
        run_pipe(build_pipe_config(payload), _settings(tmp_path), logger)


def test_run_pipe_missing_output_parts_raise(tmp_path: Path, logger: Any) -> None:
    """Output without a namespace should be rejected."""
    payload = _csv_payload(tmp_path)
    del payload["pipe"]["output"]["namespace"]

    with pytest.raises(ConfigError):
        run_pipe(build_pipe_config(payload), _settings(tmp_path), logger)


def test_runner_text_without_extraction_fails_before_reading(
    tmp_path: Path, logger: Any
) -> None:
    """Text pipes built without extraction should fail on reader use."""
    pipe = Pipe(
        id="p-3",
        name="broken",
        description=None,
        file_pattern=FilePattern(),
        record_boundary=RecordBoundary(type="text"),
        output=Output(table_name="t", catalog="c", namespace="ns"),
    )
    config = PipeConfig(pipe=pipe, source_path=str(tmp_path / "absent"))

    with pytest.raises(MissingExtractionConfigError):
        PipeRunner(config, _settings(tmp_path), logger).run()


def test_runner_requires_pipe_and_source_path(tmp_path: Path, logger: Any) -> None:
    """Runs without a pipe block should be rejected."""
    with pytest.raises(ConfigError, match="pipe"):
        PipeRunner(PipeConfig(pipe=None, source_path="/data"), _settings(tmp_path), logger)
