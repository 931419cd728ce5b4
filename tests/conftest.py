"""Pytest configuration and fixtures for LockCycle tests."""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add the parent directory to the path so we can import lockcycle
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def temp_java_file():
    """Create a temporary Java file for testing."""

    def _create_file(content, suffix=".java"):
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=suffix, delete=False, encoding="utf-8"
        ) as f:
            f.write(content)
            return f.name

    return _create_file


@pytest.fixture
def cleanup_temp_files(request):
    """Clean up temporary files after tests."""
    files = []

    def _add_file(filepath):
        if filepath:
            files.append(filepath)
        return filepath

    yield _add_file

    for filepath in files:
        try:
            if filepath and os.path.exists(filepath):
                os.unlink(filepath)
        except (OSError, PermissionError):
            pass


@pytest.fixture
def analyzer():
    """Create a new LockCycleAnalyzer instance with default settings."""
    from lockcycle.analyzer import LockCycleAnalyzer

    return LockCycleAnalyzer()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow (deselect with '-m \"not slow\"')"
    )
