"""Pipe orchestration.

This module runs one pipe end to end: select the reader, resolve the
destination, read and reshape the source, then issue the single write
to the table store. Configuration errors surface before any I/O.
"""

from __future__ import annotations

from typing import Any

import pyarrow as pa

from core.config import RuntimeSettings
from core.pipe_config import require_ingest_fields
from core.pipe_types import Pipe, PipeConfig
from core.types import PipeRunResult, TableWriteResult
from ingest.arrow_engine import ArrowEngine
from ingest.readers import ReaderStrategy, select_reader
from ingest.source_files import SourceFiles
from store.table_store import TableStore
from store.write_mode import resolve_write_mode


class PipeRunner:
    """Runner for one pipe execution."""

    def __init__(
        self,
        config: PipeConfig,
        settings: RuntimeSettings,
        logger: Any,
        source_files: SourceFiles | None = None,
        store: TableStore | None = None,
    ) -> None:
        self._pipe, self._source_path = require_ingest_fields(config)
        self._logger = logger.bind(pipe=pipe_display_name(self._pipe))
        self._engine = ArrowEngine(
            source_files or SourceFiles(config.storage), config.engine, self._logger
        )
        self._store = store or TableStore(
            config.table_store, config.storage, settings.warehouse, self._logger
        )

    def run(self) -> PipeRunResult:
        """Execute the pipe and return its summary."""
        reader = select_reader(self._pipe.record_boundary.type)
        destination = resolve_write_mode(self._pipe.output)
        self._logger.info(
            "pipe_started",
            pipe_id=self._pipe.id,
            source_path=self._source_path,
            file_type=reader.format_name,
            table=destination.table_id,
            write_mode=destination.mode.value,
        )
        table = self._load(reader)
        if self._engine.is_empty(table):
            self._logger.warning("no_data_to_process", source_path=self._source_path)
            return self._result(reader, table, None)
        write_result = self._store.write(table, destination, self._pipe.partitioning)
        self._logger.info(
            "pipe_completed",
            record_count=write_result.record_count,
            table=write_result.table_id,
            version=write_result.version,
        )
        return self._result(reader, table, write_result)

    def _load(self, reader: ReaderStrategy) -> pa.Table:
        table = reader.read(self._engine, self._source_path, self._pipe)
        table = self._engine.apply_schema(table, self._pipe.schema)
        self._logger.debug(
            "dataset_schema",
            columns=[f"{item.name}:{item.type}" for item in table.schema],
        )
        return table

    def _result(
        self,
        reader: ReaderStrategy,
        table: pa.Table,
        write_result: TableWriteResult | None,
    ) -> PipeRunResult:
        return PipeRunResult(
            pipe_name=self._pipe.name,
            source_path=self._source_path,
            file_type=reader.format_name,
            record_count=self._engine.row_count(table),
            written=write_result is not None,
            write=write_result,
        )


def run_pipe(config: PipeConfig, settings: RuntimeSettings, logger: Any) -> PipeRunResult:
    """Run one pipe and persist its dataset.

    Args:
        config: Parsed pipe payload.
        settings: Process-level settings.
        logger: Structured logger created at process start.

    Returns:
        Execution summary.

    Raises:
        ConfigError: If required configuration is missing or invalid.
        IngestError: If sources cannot be read or extraction fails.
        StoreError: If the table write fails.
    """
    runner = PipeRunner(config, settings, logger)
    return runner.run()


def pipe_display_name(pipe: Pipe) -> str:
    """Return a human-readable pipe label for logs."""
    return pipe.name or pipe.id or "unnamed-pipe"
