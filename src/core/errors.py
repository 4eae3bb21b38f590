"""Datachef exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class ChefError(Exception):
    """Base exception for all datachef failures."""


class ConfigError(ChefError):
    """Raised for missing or malformed pipe and runtime configuration."""


class UnsupportedFormatError(ConfigError):
    """Raised when a record-boundary type has no reader strategy."""


class UnsupportedWriteModeError(ConfigError):
    """Raised when an output write mode is neither overwrite nor append."""


class MissingExtractionConfigError(ConfigError):
    """Raised when a text boundary lacks a usable regex field extraction."""


class IngestError(ChefError):
    """Raised for source listing, decoding, and schema failures."""


class FieldExtractionError(IngestError):
    """Raised when the ``fail`` extraction policy meets an empty field."""


class StoreError(ChefError):
    """Raised for table store write and query failures."""


class DependencyError(ChefError):
    """Raised when an optional runtime dependency is missing."""
