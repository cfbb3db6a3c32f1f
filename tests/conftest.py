"""Shared pytest fixtures for devrecon tests."""

from pathlib import Path

import pytest


@pytest.fixture
def write(tmp_path):
    """Write a file under tmp_path, creating parent directories."""

    def _write(relpath: str, content: str = "") -> Path:
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write
