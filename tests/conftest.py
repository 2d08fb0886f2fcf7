"""Shared fixtures for seo-finalize tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import write_pages


@pytest.fixture
def export_dir(tmp_path: Path) -> Path:
    root = tmp_path / "export"
    root.mkdir()
    write_pages(root, ["index.html", "index-en.html", "about.html", "about-en.html"])
    return root
