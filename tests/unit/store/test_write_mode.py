"""Unit tests for write-mode resolution."""

from __future__ import annotations

import pytest

from core.errors import ConfigError, UnsupportedWriteModeError
from core.pipe_types import Output
from store.write_mode import WriteMode, resolve_write_mode


def test_resolve_write_mode_append_builds_identifier() -> None:
    """Append output should resolve to its qualified identifier."""
    resolved = resolve_write_mode(
        Output(catalog="c", namespace="ns", table_name="t", write_mode="append")
    )

    assert resolved.table_id == "c.ns.t"
    assert resolved.mode is WriteMode.APPEND


def test_resolve_write_mode_defaults_to_replace() -> None:
    """Missing write mode should replace the table."""
    resolved = resolve_write_mode(Output(catalog="c", namespace="ns", table_name="t"))

    assert resolved.mode is WriteMode.REPLACE


def test_resolve_write_mode_is_case_insensitive() -> None:
    """Mode names should match regardless of case."""
    resolved = resolve_write_mode(
        Output(catalog="c", namespace="ns", table_name="t", write_mode="OverWrite")
    )

    assert resolved.mode is WriteMode.REPLACE


def test_resolve_write_mode_rejects_unknown_mode() -> None:
    """Unknown modes should raise unsupported write mode error."""
    with pytest.raises(UnsupportedWriteModeError, match="merge"):
        resolve_write_mode(Output(catalog="c", namespace="ns", table_name="t", write_mode="merge"))


def test_resolve_write_mode_requires_all_identifier_parts() -> None:
    """Missing catalog should be reported by name."""
    with pytest.raises(ConfigError, match="catalog"):
        resolve_write_mode(Output(namespace="ns", table_name="t"))


@pytest.mark.parametrize("write_mode", ["", "  ", " append "])
def test_resolve_write_mode_rejects_blank_or_padded_mode(write_mode: str) -> None:
    """An explicit mode that is not exactly overwrite or append should be rejected."""
    with pytest.raises(UnsupportedWriteModeError):
        resolve_write_mode(
            Output(catalog="c", namespace="ns", table_name="t", write_mode=write_mode)
        )
