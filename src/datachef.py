"""Public SDK surface for datachef.

This module provides a stable import path for embedding the pipe
runner. It re-exports the entry points and typed models.
"""

from __future__ import annotations

from core.config import RuntimeSettings
from core.errors import (
    ChefError,
    ConfigError,
    FieldExtractionError,
    IngestError,
    MissingExtractionConfigError,
    StoreError,
    UnsupportedFormatError,
    UnsupportedWriteModeError,
)
from core.logging_config import build_logger
from core.pipe_config import build_pipe_config, load_pipe_config_file, parse_pipe_config
from core.pipe_types import Pipe, PipeConfig
from core.types import PipeRunResult, TablePreview, TableSummary, TableVersion
from ingest.glob_pattern import build_glob_pattern
from ingest.pipeline import PipeRunner, run_pipe
from ingest.readers import select_reader
from store.table_store import TableStore
from store.write_mode import ResolvedWrite, WriteMode, resolve_write_mode
from transforms.field_extraction import extract_records

__all__ = [
    "ChefError",
    "ConfigError",
    "FieldExtractionError",
    "IngestError",
    "MissingExtractionConfigError",
    "Pipe",
    "PipeConfig",
    "PipeRunResult",
    "PipeRunner",
    "ResolvedWrite",
    "RuntimeSettings",
    "StoreError",
    "TablePreview",
    "TableStore",
    "TableSummary",
    "TableVersion",
    "UnsupportedFormatError",
    "UnsupportedWriteModeError",
    "WriteMode",
    "build_glob_pattern",
    "build_logger",
    "build_pipe_config",
    "extract_records",
    "load_pipe_config_file",
    "parse_pipe_config",
    "resolve_write_mode",
    "run_pipe",
    "select_reader",
]
