"""Arrow-backed dataframe engine.

This module decodes delimited, JSON, Parquet and raw text sources into
Arrow tables. Readers decide which options to pass; the engine owns the
file listing, decoding, and schema application.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass
from typing import Any, Callable

import pyarrow as pa
import pyarrow.csv as pa_csv
import pyarrow.json as pa_json
import pyarrow.parquet as pq

from core.constants import DEFAULT_DELIMITER, DEFAULT_ENCODING, DEFAULT_HAS_HEADER
from core.errors import ConfigError, IngestError
from core.pipe_types import EngineConfig, Schema, SchemaColumn
from ingest.source_files import SourceFiles

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ARROW_TYPES: dict[str, pa.DataType] = {
    "string": pa.string(),
    "int": pa.int32(),
    "long": pa.int64(),
    "float": pa.float32(),
    "double": pa.float64(),
    "boolean": pa.bool_(),
    "date": pa.date32(),
    "timestamp": pa.timestamp("us"),
    "binary": pa.binary(),
}


@dataclass(frozen=True)
class DelimitedOptions:
    """Resolved options for delimited text decoding."""

    delimiter: str = DEFAULT_DELIMITER
    has_header: bool = DEFAULT_HAS_HEADER
    encoding: str = DEFAULT_ENCODING


class ArrowEngine:
    """Dataframe engine over pyarrow decoders."""

    def __init__(self, source_files: SourceFiles, config: EngineConfig, logger: Any) -> None:
        self._source_files = source_files
        self._config = config
        self._logger = logger

    def read_delimited(self, pattern: str, options: DelimitedOptions) -> pa.Table:
        """Read delimited files with header and type inference options."""
        if len(options.delimiter) != 1:
            raise ConfigError(
                f"Unsupported delimiter {options.delimiter!r}: expected a single character."
            )
        read_options = pa_csv.ReadOptions(
            use_threads=self._config.use_threads,
            block_size=self._config.block_size,
            autogenerate_column_names=not options.has_header,
            encoding=_arrow_encoding(options.encoding),
        )
        parse_options = pa_csv.ParseOptions(delimiter=options.delimiter)

        def decode(data: bytes) -> pa.Table:
            return pa_csv.read_csv(
                pa.BufferReader(data),
                read_options=read_options,
                parse_options=parse_options,
            )

        return self._read_tables(pattern, "delimited", decode)

    def read_json(self, pattern: str, encoding: str = DEFAULT_ENCODING) -> pa.Table:
        """Read newline-delimited JSON files, one object per line."""
        read_options = pa_json.ReadOptions(
            use_threads=self._config.use_threads,
            block_size=self._config.block_size,
        )

        def decode(data: bytes) -> pa.Table:
            return pa_json.read_json(
                pa.BufferReader(_to_utf8(data, encoding)), read_options=read_options
            )

        return self._read_tables(pattern, "json", decode)

    def read_parquet(self, pattern: str) -> pa.Table:
        """Read Parquet files."""

        def decode(data: bytes) -> pa.Table:
            return pq.read_table(pa.BufferReader(data), use_threads=self._config.use_threads)

        return self._read_tables(pattern, "parquet", decode)

    def read_text(self, pattern: str, encoding: str = DEFAULT_ENCODING) -> list[str]:
        """Read raw lines from text files in file then line order."""
        lines: list[str] = []
        for file_uri in self._list(pattern):
            text = _decode_text(self._source_files.read_bytes(file_uri), encoding, file_uri)
            file_lines = _LINE_BREAK.split(text)
            if file_lines and file_lines[-1] == "":
                file_lines.pop()
            lines.extend(file_lines)
        self._logger.info("text_lines_loaded", pattern=pattern, line_count=len(lines))
        return lines

    def row_count(self, table: pa.Table) -> int:
        """Return the number of rows in a dataset."""
        return table.num_rows

    def is_empty(self, table: pa.Table) -> bool:
        """Return whether a dataset has no rows."""
        return table.num_rows == 0

    def apply_schema(self, table: pa.Table, schema: Schema | None) -> pa.Table:
        """Cast declared columns when the schema is not inferred from data.

        Raises:
            IngestError: If a column cannot be cast or violates nullability.
        """
        if schema is None or schema.infer_from_data or not schema.columns:
            return table
        for column in schema.columns:
            table = _apply_column(table, column)
        self._logger.debug(
            "schema_applied", columns=[column.name for column in schema.columns]
        )
        return table

    def _read_tables(
        self,
        pattern: str,
        format_name: str,
        decode: Callable[[bytes], pa.Table],
    ) -> pa.Table:
        tables: list[pa.Table] = []
        for file_uri in self._list(pattern):
            data = self._source_files.read_bytes(file_uri)
            if not data.strip():
                continue
            try:
                tables.append(decode(data))
            except (pa.ArrowInvalid, UnicodeDecodeError) as error:
                raise IngestError(
                    f"Failed to decode {format_name} file {file_uri}: {error}. "
                    "Fix the malformed source file or adjust the record boundary."
                ) from error
        table = _concat_tables(tables, format_name)
        self._logger.info(
            "records_loaded",
            pattern=pattern,
            format=format_name,
            record_count=table.num_rows,
        )
        return table

    def _list(self, pattern: str) -> list[str]:
        file_uris = self._source_files.list_files(pattern)
        if not file_uris:
            self._logger.warning("no_source_files_matched", pattern=pattern)
        else:
            self._logger.debug("source_files_listed", pattern=pattern, file_count=len(file_uris))
        return file_uris


def _concat_tables(tables: list[pa.Table], format_name: str) -> pa.Table:
    """Concatenate per-file tables, unifying compatible schemas."""
    if not tables:
        return pa.table({})
    if len(tables) == 1:
        return tables[0]
    try:
        return pa.concat_tables(tables, promote_options="permissive")
    except (pa.ArrowInvalid, pa.ArrowTypeError) as error:
        raise IngestError(
            f"Failed to combine {format_name} files with incompatible schemas: {error}."
        ) from error


def _arrow_encoding(encoding: str) -> str:
    """Map an encoding to the name pyarrow's CSV reader uses natively for UTF-8."""
    codec_name = _codec_name(encoding)
    return "utf8" if codec_name == "utf-8" else codec_name


def _to_utf8(data: bytes, encoding: str) -> bytes:
    """Transcode source bytes to UTF-8 for the JSON decoder."""
    if _codec_name(encoding) == "utf-8":
        return data
    return _decode_text(data, encoding, "source").encode("utf-8")


def _decode_text(data: bytes, encoding: str, file_uri: str) -> str:
    try:
        return data.decode(_codec_name(encoding))
    except UnicodeDecodeError as error:
        raise IngestError(
            f"Failed to decode {file_uri} as {encoding}: {error}. "
            "Set recordBoundary.encoding to the file's encoding."
        ) from error


def _codec_name(encoding: str) -> str:
    try:
        return codecs.lookup(encoding).name
    except LookupError as error:
        raise ConfigError(
            f"Unknown encoding '{encoding}' in recordBoundary.encoding."
        ) from error


def _apply_column(table: pa.Table, column: SchemaColumn) -> pa.Table:
    arrow_type = _ARROW_TYPES[column.type]
    if column.name not in table.column_names:
        if not column.nullable:
            raise IngestError(
                f"Declared non-nullable column '{column.name}' is missing from the data."
            )
        return table.append_column(column.name, pa.nulls(table.num_rows, type=arrow_type))
    index = table.column_names.index(column.name)
    try:
        values = table.column(index).cast(arrow_type)
    except (pa.ArrowInvalid, pa.ArrowNotImplementedError) as error:
        raise IngestError(
            f"Failed to cast column '{column.name}' to {column.type}: {error}."
        ) from error
    if not column.nullable and values.null_count > 0:
        raise IngestError(
            f"Column '{column.name}' is declared non-nullable but has "
            f"{values.null_count} null values."
        )
    return table.set_column(index, column.name, values)
