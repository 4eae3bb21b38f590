"""Unit tests for source glob construction."""

from __future__ import annotations

from ingest.glob_pattern import (
    build_glob_pattern,
    expand_braces,
    match_file_name,
    split_glob_pattern,
)


def test_build_glob_pattern_multiple_extensions_uses_braces() -> None:
    """Several extensions should become a brace alternation."""
    assert build_glob_pattern("/data/in", ["csv", "tsv"]) == "/data/in/*.{csv,tsv}"


def test_build_glob_pattern_single_extension() -> None:
    """One extension should produce a plain suffix glob."""
    assert build_glob_pattern("s3://bucket/raw", ["json"]) == "s3://bucket/raw/*.json"


def test_build_glob_pattern_without_extensions_matches_all() -> None:
    """No extensions should match every file."""
    assert build_glob_pattern("/data/in", []) == "/data/in/*"
    assert build_glob_pattern("/data/in", None) == "/data/in/*"


def test_build_glob_pattern_applies_prefix_and_suffix() -> None:
    """Prefix and suffix should wrap the wildcard."""
    pattern = build_glob_pattern("/logs", ["log"], prefix="app-", suffix="-v1")

    assert pattern == "/logs/app-*-v1.log"


def test_build_glob_pattern_keeps_extension_order() -> None:
    """Extension order should be preserved inside the braces."""
    pattern = build_glob_pattern("/d", ["tsv", "csv", "txt"])

    assert pattern.startswith("/d/")
    assert pattern.endswith(".{tsv,csv,txt}")


def test_split_glob_pattern_separates_directory() -> None:
    """Splitting should return the directory and the name glob."""
    assert split_glob_pattern("/data/in/*.{csv,tsv}") == ("/data/in", "*.{csv,tsv}")


def test_expand_braces_lists_alternatives() -> None:
    """Brace groups should expand into plain globs."""
    assert expand_braces("*.{csv,tsv}") == ["*.csv", "*.tsv"]
    assert expand_braces("*.json") == ["*.json"]


def test_match_file_name_honors_alternation() -> None:
    """Only files matching one alternative should be selected."""
    assert match_file_name("orders.tsv", "*.{csv,tsv}")
    assert not match_file_name("orders.json", "*.{csv,tsv}")
