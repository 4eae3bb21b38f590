"""Typed pipe configuration models.

This module defines immutable models built from one pipe payload.
Ingest, transform, and store layers consume these instead of raw JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.constants import (
    DEFAULT_DELIMITER,
    DEFAULT_ENCODING,
    DEFAULT_HAS_HEADER,
    DEFAULT_ON_ERROR,
    DEFAULT_REGEX_GROUP,
    EXTRACTION_METHOD_REGEX,
)


@dataclass(frozen=True)
class FilePattern:
    """File selection rules for one source directory.

    Attributes:
        extensions: Bare extensions (no leading dot); empty matches all files.
        prefix: Optional file-name prefix.
        suffix: Optional file-name suffix placed before the extension.
    """

    extensions: tuple[str, ...] = ()
    prefix: str = ""
    suffix: str = ""


@dataclass(frozen=True)
class RegexField:
    """One named regex extraction."""

    name: str
    pattern: str
    group: int = DEFAULT_REGEX_GROUP


@dataclass(frozen=True)
class FieldExtraction:
    """Ordered regex extractions applied to raw text lines."""

    fields: tuple[RegexField, ...]
    method: str = EXTRACTION_METHOD_REGEX
    on_error: str = DEFAULT_ON_ERROR


@dataclass(frozen=True)
class RecordBoundary:
    """Record-boundary strategy and its format options.

    Attributes:
        type: Raw boundary type; validated when a reader is selected.
        delimiter: Field separator for delimited input.
        has_header: Whether delimited input starts with a header row.
        encoding: Source text encoding.
        field_extraction: Regex extraction, only meaningful for ``text``.
    """

    type: str | None
    delimiter: str = DEFAULT_DELIMITER
    has_header: bool = DEFAULT_HAS_HEADER
    encoding: str = DEFAULT_ENCODING
    field_extraction: FieldExtraction | None = None


@dataclass(frozen=True)
class SchemaColumn:
    """Declared output column."""

    name: str
    type: str = "string"
    nullable: bool = True


@dataclass(frozen=True)
class Schema:
    """Declared schema or a request to infer it from data."""

    infer_from_data: bool = True
    columns: tuple[SchemaColumn, ...] = ()


@dataclass(frozen=True)
class Partitioning:
    """Partition keys passed through to the table store."""

    enabled: bool = False
    keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class Output:
    """Destination table descriptor.

    Attributes:
        table_name: Destination table name.
        catalog: Catalog part of the qualified identifier.
        namespace: Namespace part of the qualified identifier.
        write_mode: Raw write mode; ``None`` resolves to overwrite.
    """

    table_name: str | None = None
    catalog: str | None = None
    namespace: str | None = None
    write_mode: str | None = None


@dataclass(frozen=True)
class Pipe:
    """One declarative ingestion job."""

    id: str | None
    name: str | None
    description: str | None
    file_pattern: FilePattern
    record_boundary: RecordBoundary
    output: Output
    schema: Schema | None = None
    partitioning: Partitioning | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class StorageConfig:
    """Object-storage connection settings, passed through unmodified."""

    endpoint: str | None = None
    port: int | None = None
    use_ssl: bool = False
    access_key: str | None = None
    secret_key: str | None = None
    region: str | None = None
    default_bucket: str | None = None


@dataclass(frozen=True)
class EngineConfig:
    """Dataframe engine tuning."""

    use_threads: bool = True
    block_size: int | None = None


@dataclass(frozen=True)
class TableStoreConfig:
    """Table store location."""

    warehouse: str | None = None
    catalog: str | None = None


@dataclass(frozen=True)
class PipeConfig:
    """Validated pipe payload root."""

    pipe: Pipe | None
    source_path: str | None
    storage: StorageConfig = field(default_factory=StorageConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    table_store: TableStoreConfig = field(default_factory=TableStoreConfig)
