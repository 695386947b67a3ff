"""Shared test fixtures for todoscan tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from todoscan.config import ScanConfig


def rel_files(root: str, files: list[str]) -> list[str]:
    """Scanner output as sorted root-relative POSIX paths."""
    return sorted(os.path.relpath(f, root).replace(os.sep, "/") for f in files)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str]], str]:
    """Build a directory tree from {relative_path: content} and return its root."""

    def _make(files: dict[str, str]) -> str:
        for rel, content in files.items():
            p = tmp_path / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(content, encoding="utf-8")
        return str(tmp_path)

    return _make


@pytest.fixture
def config(tmp_path: Path) -> ScanConfig:
    return ScanConfig(root=str(tmp_path))
