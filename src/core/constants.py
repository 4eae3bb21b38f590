"""Core constants used across datachef modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_WAREHOUSE = Path(".datachef") / "warehouse"
DEFAULT_CATALOG_NAME = "chef_catalog"
DEFAULT_NAMESPACE = "default"
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warn", "error")
LANCE_TABLE_SUFFIX = ".lance"

DEFAULT_DELIMITER = ","
DEFAULT_HAS_HEADER = True
DEFAULT_ENCODING = "utf-8"

EXTRACTION_METHOD_REGEX = "regex"
DEFAULT_REGEX_GROUP = 1
ON_ERROR_SKIP = "skip"
ON_ERROR_NULL = "null"
ON_ERROR_FAIL = "fail"
DEFAULT_ON_ERROR = ON_ERROR_NULL
SUPPORTED_ON_ERROR_POLICIES = (ON_ERROR_SKIP, ON_ERROR_NULL, ON_ERROR_FAIL)

WRITE_MODE_OVERWRITE = "overwrite"
WRITE_MODE_APPEND = "append"
DEFAULT_WRITE_MODE = WRITE_MODE_OVERWRITE

DEFAULT_PREVIEW_LIMIT = 10
SUPPORTED_QUERY_ACTIONS = ("list", "preview", "versions")
SUPPORTED_COLUMN_TYPES = (
    "string",
    "int",
    "long",
    "float",
    "double",
    "boolean",
    "date",
    "timestamp",
    "binary",
)
