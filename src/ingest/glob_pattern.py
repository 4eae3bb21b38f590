"""Glob expressions for source file selection.

This module builds the glob handed to the dataframe engine and the
matcher the engine uses to expand ``{a,b}`` alternation.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Sequence


def build_glob_pattern(
    base_path: str,
    extensions: Sequence[str] | None,
    prefix: str = "",
    suffix: str = "",
) -> str:
    """Build a one-level glob for files under ``base_path``.

    Args:
        base_path: Source directory, local path or object-store URI.
        extensions: Bare extensions in priority order; empty matches all.
        prefix: Optional file-name prefix.
        suffix: Optional file-name suffix before the extension.

    Returns:
        ``base/*``, ``base/*.ext`` or ``base/*.{e1,e2}``.
    """
    name_stem = f"{prefix}*{suffix}"
    if not extensions:
        return f"{base_path}/{name_stem}"
    if len(extensions) == 1:
        return f"{base_path}/{name_stem}.{extensions[0]}"
    return f"{base_path}/{name_stem}.{{{','.join(extensions)}}}"


def split_glob_pattern(pattern: str) -> tuple[str, str]:
    """Split a glob into its directory and file-name glob."""
    directory, _, name_glob = pattern.rpartition("/")
    return directory, name_glob


def expand_braces(name_glob: str) -> list[str]:
    """Expand the first ``{a,b,...}`` group into plain fnmatch globs.

    Later groups are expanded recursively; a glob without braces is
    returned as its only alternative.
    """
    open_index = name_glob.find("{")
    close_index = name_glob.find("}", open_index + 1)
    if open_index < 0 or close_index < 0:
        return [name_glob]
    head = name_glob[:open_index]
    tail = name_glob[close_index + 1 :]
    alternatives: list[str] = []
    for option in name_glob[open_index + 1 : close_index].split(","):
        alternatives.extend(expand_braces(f"{head}{option}{tail}"))
    return alternatives


def match_file_name(file_name: str, name_glob: str) -> bool:
    """Return whether a file name matches a brace-aware glob."""
    return any(fnmatchcase(file_name, option) for option in expand_braces(name_glob))
