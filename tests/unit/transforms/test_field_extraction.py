"""Unit tests for regex field extraction."""

from __future__ import annotations

import pytest

from core.errors import FieldExtractionError
from core.pipe_types import FieldExtraction, RegexField
from transforms.field_extraction import (
    apply_error_policy,
    extract_fields,
    extract_records,
    records_to_table,
)

_LEVEL = RegexField(name="level", pattern=r"\w+ (\w+) .*", group=1)
_MISSING = RegexField(name="user", pattern=r"user=(\w+)", group=1)


def test_extract_fields_reads_capture_group() -> None:
    """Matching pattern should yield the configured group."""
    records = extract_fields(["2024-01-01 ERROR boom"], [_LEVEL])

    assert records == [{"level": "ERROR"}]


def test_extract_records_null_policy_keeps_empty_values() -> None:
    """Null policy should keep records with empty values."""
    extraction = FieldExtraction(fields=(_LEVEL, _MISSING), on_error="null")

    records = extract_records(["2024-01-01 ERROR boom", "noise"], extraction)

    assert records == [
        {"level": "ERROR", "user": ""},
        {"level": "", "user": ""},
    ]


def test_extract_records_skip_policy_drops_incomplete_lines() -> None:
    """Skip policy should drop a line whose field pattern misses."""
    extraction = FieldExtraction(fields=(_LEVEL, _MISSING), on_error="skip")

    records = extract_records(["2024-01-01 ERROR boom"], extraction)

    assert records == []


def test_skip_policy_keeps_only_fully_populated_records() -> None:
    """Every surviving record should have no empty value."""
    extraction = FieldExtraction(fields=(_LEVEL, _MISSING), on_error="skip")
    lines = [
        "2024-01-01 ERROR user=ann failed",
        "2024-01-02 INFO started",
        "user=bob",
        "2024-01-03 WARN user=cy slow",
    ]

    records = extract_records(lines, extraction)

    assert [record["user"] for record in records] == ["ann", "cy"]
    assert all(value != "" for record in records for value in record.values())


def test_fail_policy_raises_on_empty_value() -> None:
    """Fail policy should abort on the first empty value."""
    extraction = FieldExtraction(fields=(_LEVEL,), on_error="fail")

    with pytest.raises(FieldExtractionError, match="line 2"):
        extract_records(["2024-01-01 ERROR boom", "noise"], extraction)


def test_group_beyond_pattern_groups_yields_empty_value() -> None:
    """Group index past the pattern's groups should extract nothing."""
    field = RegexField(name="x", pattern=r"(a)", group=2)

    assert extract_fields(["abc"], [field]) == [{"x": ""}]


def test_group_zero_returns_whole_match() -> None:
    """Group zero should return the full match."""
    field = RegexField(name="date", pattern=r"\d{4}-\d{2}-\d{2}", group=0)

    assert extract_fields(["at 2024-01-01 ok"], [field]) == [{"date": "2024-01-01"}]


def test_extract_records_is_repeatable() -> None:
    """Extraction over the same lines should give the same records."""
    extraction = FieldExtraction(fields=(_LEVEL, _MISSING), on_error="null")
    lines = ["2024-01-01 ERROR user=ann failed", "noise"]

    assert extract_records(lines, extraction) == extract_records(lines, extraction)


def test_apply_error_policy_with_no_records_returns_empty() -> None:
    """Zero lines should produce zero records under any policy."""
    for policy in ("null", "skip", "fail"):
        assert apply_error_policy([], [_LEVEL], policy) == []


def test_records_to_table_keeps_declaration_order() -> None:
    """Table columns should follow field declaration order as strings."""
    table = records_to_table([{"user": "ann", "level": "ERROR"}], [_LEVEL, _MISSING])

    assert table.column_names == ["level", "user"]
    assert table.column("user").to_pylist() == ["ann"]
    assert str(table.schema.field("level").type) == "string"


def test_apply_error_policy_matches_policy_case_insensitively() -> None:
    """Upper-case policy names should behave like their lower-case forms."""
    extraction = FieldExtraction(fields=(_LEVEL, _MISSING), on_error="SKIP")

    assert extract_records(["2024-01-01 ERROR boom"], extraction) == []
