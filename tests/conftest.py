"""Pytest configuration for repository test runs."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Any

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def log_stream() -> io.StringIO:
    """In-memory sink for structured log lines."""
    return io.StringIO()


@pytest.fixture
def logger(log_stream: io.StringIO) -> Any:
    """Debug-level JSON logger writing to ``log_stream``."""
    from core.logging_config import build_logger

    return build_logger("debug", stream=log_stream)
