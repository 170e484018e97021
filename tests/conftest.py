"""
Shared fixtures for the deepfind test suite.

make_tree writes a small directory tree from a {relative path: content} map;
str content is written as UTF-8, bytes content is written as-is.
"""
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict], Path]:
    def _make(files: dict[str, str | bytes]) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_bytes(content.encode("utf-8"))
        return tmp_path

    return _make


@pytest.fixture
def warnings_sink() -> list[str]:
    return []
