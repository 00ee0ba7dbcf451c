"""
Pytest configuration and shared fixtures for miniconfig tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from miniconfig.logging import get_global_logger, set_global_logger


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture(autouse=True)
def restore_global_logger():
    """Put the global logger back after tests that replace it."""
    original = get_global_logger()
    yield
    set_global_logger(original)


@pytest.fixture
def sample_db_config() -> dict[str, Any]:
    """Provide a small configuration with one category."""
    return {
        "db": {
            "user": "app",
            "host": "localhost",
            "port": 5432,
        },
    }


@pytest.fixture
def write_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary text files.

    Usage:
        path = write_file("conf/app.ini", "[db]\\nuser = app\\n")
    """

    def _write(filename: str, content: str) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def create_json_file(write_file):
    """
    Factory fixture for creating temporary JSON files.

    Usage:
        json_path = create_json_file("conf/app.json", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        return write_file(filename, json.dumps(data))

    return _create


@pytest.fixture
def create_yaml_file(write_file):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("conf/app.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        return write_file(filename, yaml.safe_dump(data))

    return _create


class RecordingLogger:
    """Logger that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, str]] = []

    def verbose(self, prefix: str, message: str) -> None:
        self.messages.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.messages.append(("debug", prefix, message))

    def warning(self, prefix: str, message: str) -> None:
        self.messages.append(("warning", prefix, message))

    def of_level(self, level: str) -> list[str]:
        return [m for lvl, _, m in self.messages if lvl == level]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Provide a logger that records messages instead of printing them."""
    return RecordingLogger()
