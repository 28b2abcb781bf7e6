"""
Test configuration and fixtures for marko.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to the Python path to ensure imports work correctly
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))


@pytest.fixture
def markdown_file(tmp_path):
    """Write markdown to a temporary file and return its path as a string."""

    def _write(content: str, name: str = "doc.md") -> str:
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GLAMOUR_STYLE", "PAGER", "MARKO_LOG_LEVEL", "COLORFGBG", "NO_COLOR"):
        monkeypatch.delenv(name, raising=False)
