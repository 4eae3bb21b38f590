"""Pipe payload parsing and validation.

This module turns one JSON pipe payload into typed, immutable config
models. Parsing is pure: it never touches files or the network, and the
same payload always yields the same result or the same error.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.config_fields import (
    expect_mapping,
    expect_sequence,
    field_path,
    optional_bool,
    optional_int,
    optional_mapping,
    optional_string,
    raw_string,
    required_string,
    string_list,
    verbatim_string,
)
from core.constants import (
    DEFAULT_DELIMITER,
    DEFAULT_ENCODING,
    DEFAULT_HAS_HEADER,
    DEFAULT_ON_ERROR,
    DEFAULT_REGEX_GROUP,
    EXTRACTION_METHOD_REGEX,
    SUPPORTED_COLUMN_TYPES,
    SUPPORTED_ON_ERROR_POLICIES,
)
from core.errors import ConfigError, MissingExtractionConfigError
from core.pipe_types import (
    EngineConfig,
    FieldExtraction,
    FilePattern,
    Output,
    Partitioning,
    Pipe,
    PipeConfig,
    RecordBoundary,
    RegexField,
    Schema,
    SchemaColumn,
    StorageConfig,
    TableStoreConfig,
)


def parse_pipe_config(raw_json: str | None) -> PipeConfig:
    """Parse a JSON-encoded pipe payload.

    Args:
        raw_json: Raw JSON document.

    Returns:
        Validated pipe configuration.

    Raises:
        ConfigError: If the payload is missing, not JSON, or fails validation.
        MissingExtractionConfigError: If a text boundary lacks regex fields.
    """
    if raw_json is None or not raw_json.strip():
        raise ConfigError("Missing pipe configuration payload. Pass a JSON document.")
    try:
        payload = cast(object, json.loads(raw_json))
    except json.JSONDecodeError as error:
        raise ConfigError(
            f"Failed to parse pipe configuration JSON: {error.msg} "
            f"(line {error.lineno}, column {error.colno})."
        ) from error
    return build_pipe_config(payload)


def load_pipe_config_file(config_path: str) -> PipeConfig:
    """Load a pipe payload from a ``.json``, ``.yaml`` or ``.yml`` file.

    Args:
        config_path: File path to the payload.

    Returns:
        Validated pipe configuration.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_file = Path(config_path).expanduser().resolve()
    if not config_file.exists():
        raise ConfigError(
            f"Pipe config file does not exist at {config_file}. Provide a valid file path."
        )
    try:
        text = config_file.read_text(encoding="utf-8")
    except OSError as error:
        raise ConfigError(
            f"Failed to read pipe config at {config_file}: {error}. Check file permissions."
        ) from error
    if config_file.suffix.lower() not in {".yaml", ".yml"}:
        return parse_pipe_config(text)
    try:
        payload = cast(object, yaml.safe_load(text))
    except yaml.YAMLError as error:
        raise ConfigError(
            f"Failed to parse YAML pipe config at {config_file}: {error}. Fix YAML syntax."
        ) from error
    if payload is None:
        raise ConfigError(f"Pipe config at {config_file} is empty. Define 'pipe' and 'sourcePath'.")
    return build_pipe_config(payload)


def build_pipe_config(payload: object) -> PipeConfig:
    """Validate a decoded payload object into a ``PipeConfig``."""
    root = expect_mapping(payload, "root")
    raw_pipe = optional_mapping(root, "pipe", "")
    return PipeConfig(
        pipe=_parse_pipe(raw_pipe) if raw_pipe is not None else None,
        source_path=optional_string(root, "sourcePath", ""),
        storage=_parse_storage(optional_mapping(root, "storage", "")),
        engine=_parse_engine(optional_mapping(root, "engine", "")),
        table_store=_parse_table_store(optional_mapping(root, "tableStore", "")),
    )


def require_ingest_fields(config: PipeConfig) -> tuple[Pipe, str]:
    """Return the pipe and source path required for an ingest run.

    Raises:
        ConfigError: If either ``pipe`` or ``sourcePath`` is absent.
    """
    missing = [
        name
        for name, value in (("pipe", config.pipe), ("sourcePath", config.source_path))
        if value is None
    ]
    if missing or config.pipe is None or config.source_path is None:
        raise ConfigError(
            f"Missing required configuration: {', '.join(missing)}. "
            "Both 'pipe' and 'sourcePath' are needed to run a pipe."
        )
    return config.pipe, config.source_path


def _parse_pipe(mapping: Mapping[str, object]) -> Pipe:
    context = "pipe"
    record_boundary = _parse_record_boundary(optional_mapping(mapping, "recordBoundary", context))
    raw_schema = optional_mapping(mapping, "schema", context)
    raw_partitioning = optional_mapping(mapping, "partitioning", context)
    return Pipe(
        id=optional_string(mapping, "id", context),
        name=optional_string(mapping, "name", context),
        description=optional_string(mapping, "description", context),
        file_pattern=_parse_file_pattern(optional_mapping(mapping, "filePattern", context)),
        record_boundary=record_boundary,
        output=_parse_output(optional_mapping(mapping, "output", context)),
        schema=_parse_schema(raw_schema) if raw_schema is not None else None,
        partitioning=(
            _parse_partitioning(raw_partitioning) if raw_partitioning is not None else None
        ),
        created_at=optional_string(mapping, "createdAt", context),
        updated_at=optional_string(mapping, "updatedAt", context),
    )


def _parse_file_pattern(mapping: Mapping[str, object] | None) -> FilePattern:
    if mapping is None:
        return FilePattern()
    context = "pipe.filePattern"
    field_name = "extensions" if mapping.get("extensions") is not None else "extension"
    extensions = tuple(
        extension.strip().lstrip(".")
        for extension in string_list(mapping, field_name, context)
        if extension.strip().lstrip(".")
    )
    return FilePattern(
        extensions=extensions,
        prefix=optional_string(mapping, "prefix", context) or "",
        suffix=optional_string(mapping, "suffix", context) or "",
    )


def _parse_record_boundary(mapping: Mapping[str, object] | None) -> RecordBoundary:
    if mapping is None:
        return RecordBoundary(type=None)
    context = "pipe.recordBoundary"
    boundary_type = verbatim_string(mapping, "type", context)
    raw_extraction = optional_mapping(mapping, "fieldExtraction", context)
    extraction = _parse_field_extraction(raw_extraction) if raw_extraction is not None else None
    if boundary_type is not None and boundary_type.lower() == "text":
        _validate_text_extraction(extraction)
    return RecordBoundary(
        type=boundary_type,
        delimiter=raw_string(mapping, "delimiter", context, DEFAULT_DELIMITER),
        has_header=optional_bool(mapping, "hasHeader", context, DEFAULT_HAS_HEADER),
        encoding=optional_string(mapping, "encoding", context) or DEFAULT_ENCODING,
        field_extraction=extraction,
    )


def _validate_text_extraction(extraction: FieldExtraction | None) -> None:
    if extraction is None:
        raise MissingExtractionConfigError(
            "Record boundary type 'text' requires 'fieldExtraction' with regex fields."
        )
    if extraction.method != EXTRACTION_METHOD_REGEX:
        raise MissingExtractionConfigError(
            f"Unsupported fieldExtraction.method '{extraction.method}' for text input. "
            "Only 'regex' is supported."
        )
    if not extraction.fields:
        raise MissingExtractionConfigError(
            "Record boundary type 'text' requires a non-empty 'fieldExtraction.fields' list."
        )


def _parse_field_extraction(mapping: Mapping[str, object]) -> FieldExtraction:
    context = "pipe.recordBoundary.fieldExtraction"
    raw_fields = mapping.get("fields")
    fields: tuple[RegexField, ...] = ()
    if raw_fields is not None:
        fields_path = field_path(context, "fields")
        fields = tuple(
            _parse_regex_field(item, f"{fields_path}[{index}]")
            for index, item in enumerate(expect_sequence(raw_fields, fields_path))
        )
    _reject_duplicate_names(fields, context)
    return FieldExtraction(
        fields=fields,
        method=optional_string(mapping, "method", context) or "",
        on_error=_parse_on_error(mapping, context),
    )


def _parse_regex_field(value: object, context: str) -> RegexField:
    mapping = expect_mapping(value, context)
    name = required_string(mapping, "name", context)
    pattern = mapping.get("pattern")
    if not isinstance(pattern, str) or not pattern:
        raise ConfigError(f"Config field '{context}.pattern' must be a non-empty string.")
    try:
        re.compile(pattern)
    except re.error as error:
        raise ConfigError(
            f"Invalid regular expression in '{context}.pattern': {error}. Fix the pattern."
        ) from error
    group = optional_int(mapping, "group", context)
    if group is not None and group < 0:
        raise ConfigError(f"Config field '{context}.group' must be zero or greater.")
    return RegexField(
        name=name,
        pattern=pattern,
        group=DEFAULT_REGEX_GROUP if group is None else group,
    )


def _reject_duplicate_names(fields: tuple[RegexField, ...], context: str) -> None:
    seen_names: set[str] = set()
    for regex_field in fields:
        if regex_field.name in seen_names:
            raise ConfigError(
                f"Duplicate field name '{regex_field.name}' in '{context}.fields'. "
                "Each extracted field needs a unique name."
            )
        seen_names.add(regex_field.name)


def _parse_on_error(mapping: Mapping[str, object], context: str) -> str:
    value = optional_string(mapping, "onError", context)
    if value is None:
        return DEFAULT_ON_ERROR
    normalized_value = value.lower()
    if normalized_value in SUPPORTED_ON_ERROR_POLICIES:
        return normalized_value
    supported_rows = ", ".join(SUPPORTED_ON_ERROR_POLICIES)
    raise ConfigError(
        f"Invalid '{context}.onError' value '{value}'. Use one of: {supported_rows}."
    )


def _parse_schema(mapping: Mapping[str, object]) -> Schema:
    context = "pipe.schema"
    raw_columns = mapping.get("columns")
    columns: tuple[SchemaColumn, ...] = ()
    if raw_columns is not None:
        columns_path = field_path(context, "columns")
        columns = tuple(
            _parse_schema_column(item, f"{columns_path}[{index}]")
            for index, item in enumerate(expect_sequence(raw_columns, columns_path))
        )
    return Schema(
        infer_from_data=optional_bool(mapping, "inferFromData", context, True),
        columns=columns,
    )


def _parse_schema_column(value: object, context: str) -> SchemaColumn:
    mapping = expect_mapping(value, context)
    column_type = (optional_string(mapping, "type", context) or "string").lower()
    if column_type not in SUPPORTED_COLUMN_TYPES:
        supported_rows = ", ".join(SUPPORTED_COLUMN_TYPES)
        raise ConfigError(
            f"Unsupported column type '{column_type}' in '{context}.type'. "
            f"Use one of: {supported_rows}."
        )
    return SchemaColumn(
        name=required_string(mapping, "name", context),
        type=column_type,
        nullable=optional_bool(mapping, "nullable", context, True),
    )


def _parse_partitioning(mapping: Mapping[str, object]) -> Partitioning:
    context = "pipe.partitioning"
    keys: list[str] = []
    raw_keys = mapping.get("keys")
    if raw_keys is not None:
        keys_path = field_path(context, "keys")
        for index, item in enumerate(expect_sequence(raw_keys, keys_path)):
            keys.append(_parse_partition_key(item, f"{keys_path}[{index}]"))
    return Partitioning(
        enabled=optional_bool(mapping, "enabled", context, False),
        keys=tuple(keys),
    )


def _parse_partition_key(value: object, context: str) -> str:
    # Keys are either bare column names or objects carrying a ``column`` field.
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, Mapping):
        return required_string(expect_mapping(value, context), "column", context)
    raise ConfigError(f"Config field '{context}' must be a column name or an object.")


def _parse_output(mapping: Mapping[str, object] | None) -> Output:
    if mapping is None:
        return Output()
    context = "pipe.output"
    return Output(
        table_name=optional_string(mapping, "tableName", context),
        catalog=optional_string(mapping, "catalog", context),
        namespace=optional_string(mapping, "namespace", context),
        write_mode=verbatim_string(mapping, "writeMode", context),
    )


def _parse_storage(mapping: Mapping[str, object] | None) -> StorageConfig:
    if mapping is None:
        return StorageConfig()
    context = "storage"
    return StorageConfig(
        endpoint=optional_string(mapping, "endpoint", context),
        port=optional_int(mapping, "port", context),
        use_ssl=optional_bool(mapping, "useSSL", context, False),
        access_key=optional_string(mapping, "accessKey", context),
        secret_key=optional_string(mapping, "secretKey", context),
        region=optional_string(mapping, "region", context),
        default_bucket=optional_string(mapping, "defaultBucket", context),
    )


def _parse_engine(mapping: Mapping[str, object] | None) -> EngineConfig:
    if mapping is None:
        return EngineConfig()
    context = "engine"
    block_size = optional_int(mapping, "blockSize", context)
    if block_size is not None and block_size <= 0:
        raise ConfigError("Config field 'engine.blockSize' must be a positive integer.")
    return EngineConfig(
        use_threads=optional_bool(mapping, "useThreads", context, True),
        block_size=block_size,
    )


def _parse_table_store(mapping: Mapping[str, object] | None) -> TableStoreConfig:
    if mapping is None:
        return TableStoreConfig()
    context = "tableStore"
    return TableStoreConfig(
        warehouse=optional_string(mapping, "warehouse", context),
        catalog=optional_string(mapping, "catalog", context),
    )
