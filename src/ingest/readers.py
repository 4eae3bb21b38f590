"""Record-boundary reader strategies.

This module maps a declared record-boundary type onto one reader
strategy. Each strategy resolves format options and the source glob,
then delegates decoding to the dataframe engine.
"""

from __future__ import annotations

from typing import Protocol

import pyarrow as pa

from core.errors import MissingExtractionConfigError, UnsupportedFormatError
from core.pipe_types import Pipe
from ingest.arrow_engine import ArrowEngine, DelimitedOptions
from ingest.glob_pattern import build_glob_pattern
from transforms.field_extraction import extract_records, records_to_table


class ReaderStrategy(Protocol):
    """Reads one pipe's source files into a tabular dataset."""

    format_name: str

    def read(self, engine: ArrowEngine, source_path: str, pipe: Pipe) -> pa.Table:
        """Read matching files under ``source_path``."""
        ...


class JsonReader:
    """Newline-delimited JSON, one object per line."""

    format_name = "json"

    def read(self, engine: ArrowEngine, source_path: str, pipe: Pipe) -> pa.Table:
        return engine.read_json(
            source_glob(source_path, pipe), encoding=pipe.record_boundary.encoding
        )


class DelimitedReader:
    """Delimited text with header detection and type inference."""

    format_name = "delimited"

    def read(self, engine: ArrowEngine, source_path: str, pipe: Pipe) -> pa.Table:
        boundary = pipe.record_boundary
        options = DelimitedOptions(
            delimiter=boundary.delimiter,
            has_header=boundary.has_header,
            encoding=boundary.encoding,
        )
        return engine.read_delimited(source_glob(source_path, pipe), options)


class ParquetReader:
    """Columnar Parquet files; no format options."""

    format_name = "parquet"

    def read(self, engine: ArrowEngine, source_path: str, pipe: Pipe) -> pa.Table:
        return engine.read_parquet(source_glob(source_path, pipe))


class TextReader:
    """Raw lines reshaped into named fields by regex extraction."""

    format_name = "text"

    def read(self, engine: ArrowEngine, source_path: str, pipe: Pipe) -> pa.Table:
        extraction = pipe.record_boundary.field_extraction
        if extraction is None or not extraction.fields:
            raise MissingExtractionConfigError(
                "Record boundary type 'text' requires 'fieldExtraction' with regex fields."
            )
        lines = engine.read_text(
            source_glob(source_path, pipe), encoding=pipe.record_boundary.encoding
        )
        records = extract_records(lines, extraction)
        return records_to_table(records, extraction.fields)


_READERS: dict[str, type[ReaderStrategy]] = {
    "json": JsonReader,
    "delimited": DelimitedReader,
    "csv": DelimitedReader,
    "parquet": ParquetReader,
    "text": TextReader,
}


def select_reader(file_type: str | None) -> ReaderStrategy:
    """Select the reader strategy for a record-boundary type.

    Args:
        file_type: Declared type, matched case-insensitively.

    Returns:
        Reader strategy instance.

    Raises:
        UnsupportedFormatError: If the type is missing or unknown.
    """
    reader_class = _READERS.get(file_type.lower()) if file_type else None
    if reader_class is None:
        supported_rows = ", ".join(supported_file_types())
        raise UnsupportedFormatError(
            f"Unsupported file type: {file_type!r}. Use one of: {supported_rows}."
        )
    return reader_class()


def supported_file_types() -> tuple[str, ...]:
    """Return record-boundary types with a reader strategy."""
    return tuple(_READERS)


def source_glob(source_path: str, pipe: Pipe) -> str:
    """Build the source glob from a pipe's file pattern."""
    file_pattern = pipe.file_pattern
    return build_glob_pattern(
        source_path,
        file_pattern.extensions,
        prefix=file_pattern.prefix,
        suffix=file_pattern.suffix,
    )
