"""Regex field extraction for raw text lines.

This module turns unstructured lines into records of named string fields.
Every field owns an independent pattern that is searched in the same
line; a miss yields an empty string rather than an error. The ``onError``
policy then decides what happens to records with empty values.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

import pyarrow as pa

from core.constants import ON_ERROR_FAIL, ON_ERROR_NULL, ON_ERROR_SKIP
from core.errors import ConfigError, FieldExtractionError
from core.pipe_types import FieldExtraction, RegexField

ExtractedRecord = dict[str, str]


def extract_fields(lines: Iterable[str], fields: Sequence[RegexField]) -> list[ExtractedRecord]:
    """Extract every declared field from every line.

    Args:
        lines: Raw text lines in source order.
        fields: Ordered field declarations.

    Returns:
        One record per line; keys follow declaration order.
    """
    compiled = [(field.name, re.compile(field.pattern), field.group) for field in fields]
    return [
        {name: _extract_value(pattern, group, line) for name, pattern, group in compiled}
        for line in lines
    ]


def apply_error_policy(
    records: list[ExtractedRecord],
    fields: Sequence[RegexField],
    on_error: str,
) -> list[ExtractedRecord]:
    """Apply the ``onError`` policy to extracted records.

    ``null`` keeps records as-is. ``skip`` runs one filter pass per field,
    each dropping records whose value for that field is empty. ``fail``
    aborts on the first record holding any empty value. Policy names
    match case-insensitively.

    Raises:
        FieldExtractionError: Under ``fail`` when a value is empty.
        ConfigError: If the policy name is unknown.
    """
    on_error = on_error.lower()
    if on_error == ON_ERROR_NULL:
        return records
    if on_error == ON_ERROR_SKIP:
        surviving = records
        for field in fields:
            surviving = [record for record in surviving if record[field.name] != ""]
        return surviving
    if on_error == ON_ERROR_FAIL:
        for line_number, record in enumerate(records, 1):
            for field in fields:
                if record[field.name] == "":
                    raise FieldExtractionError(
                        f"Field '{field.name}' extracted an empty value from line {line_number} "
                        f"(pattern {field.pattern!r}). Fix the pattern or use onError 'skip'/'null'."
                    )
        return records
    raise ConfigError(f"Unsupported onError policy '{on_error}'.")


def extract_records(lines: Iterable[str], extraction: FieldExtraction) -> list[ExtractedRecord]:
    """Extract fields and apply the configured error policy."""
    records = extract_fields(lines, extraction.fields)
    return apply_error_policy(records, extraction.fields, extraction.on_error)


def records_to_table(records: list[ExtractedRecord], fields: Sequence[RegexField]) -> pa.Table:
    """Build a string-typed table with one column per field in order."""
    columns = {
        field.name: pa.array([record[field.name] for record in records], type=pa.string())
        for field in fields
    }
    return pa.table(columns)


def _extract_value(pattern: re.Pattern[str], group: int, line: str) -> str:
    match = pattern.search(line)
    if match is None or group > pattern.groups:
        return ""
    value = match.group(group)
    return value if value is not None else ""
