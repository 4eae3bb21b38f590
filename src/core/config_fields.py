"""Type-safe field parsing helpers for pipe payloads.

This module centralizes primitive parsing so the pipe parser stays
concise and reports consistent errors naming the offending field path.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.errors import ConfigError


def field_path(context: str, field_name: str) -> str:
    """Join a parent context and field name into a dotted path."""
    return f"{context}.{field_name}" if context else field_name


def expect_mapping(value: object, context: str) -> Mapping[str, object]:
    """Validate a JSON object with string keys."""
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise ConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise ConfigError(
        f"Invalid config field '{context}': expected object, got {type(value).__name__}."
    )


def expect_sequence(value: object, context: str) -> Sequence[object]:
    """Validate a JSON array."""
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise ConfigError(
        f"Invalid config field '{context}': expected list, got {type(value).__name__}."
    )


def optional_mapping(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
) -> Mapping[str, object] | None:
    """Read an optional nested object."""
    value = mapping.get(field_name)
    if value is None:
        return None
    return expect_mapping(value, field_path(context, field_name))


def required_string(mapping: Mapping[str, object], field_name: str, context: str) -> str:
    """Read a required non-blank string field."""
    value = optional_string(mapping, field_name, context)
    if value is None:
        raise ConfigError(
            f"Missing required config field '{field_path(context, field_name)}'."
        )
    return value


def optional_string(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
) -> str | None:
    """Read an optional string field; blank strings count as absent."""
    value = mapping.get(field_name)
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    raise ConfigError(
        f"Config field '{field_path(context, field_name)}' must be a string when provided."
    )


def verbatim_string(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
) -> str | None:
    """Read an optional string field as given; blank strings stay distinct from absent."""
    value = mapping.get(field_name)
    if value is None or isinstance(value, str):
        return value
    raise ConfigError(
        f"Config field '{field_path(context, field_name)}' must be a string when provided."
    )


def raw_string(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
    default_value: str,
) -> str:
    """Read a string field verbatim, keeping whitespace such as tab delimiters."""
    value = mapping.get(field_name)
    if value is None or value == "":
        return default_value
    if isinstance(value, str):
        return value
    raise ConfigError(
        f"Config field '{field_path(context, field_name)}' must be a string when provided."
    )


def optional_int(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
) -> int | None:
    """Read an optional integer field."""
    value = mapping.get(field_name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(
            f"Config field '{field_path(context, field_name)}' must be an integer."
        )
    return value


def optional_bool(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
    default_value: bool,
) -> bool:
    """Read an optional boolean field."""
    value = mapping.get(field_name)
    if value is None:
        return default_value
    if isinstance(value, bool):
        return value
    raise ConfigError(
        f"Config field '{field_path(context, field_name)}' must be true/false."
    )


def string_list(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
) -> tuple[str, ...]:
    """Read a list of strings; a bare string counts as a one-item list."""
    value = mapping.get(field_name)
    if value is None:
        return ()
    path = field_path(context, field_name)
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    items: list[str] = []
    for index, item in enumerate(expect_sequence(value, path)):
        if not isinstance(item, str):
            raise ConfigError(f"Config field '{path}[{index}]' must be a string.")
        items.append(item)
    return tuple(items)
