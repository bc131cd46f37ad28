"""Root test configuration: image factories and environment isolation"""

import os
from pathlib import Path

import pytest
from PIL import Image

from mdsite.core.models import SourceAsset


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop MDSITE_* variables so host settings never leak into tests."""
    for name in list(os.environ):
        if name.startswith("MDSITE_"):
            monkeypatch.delenv(name)


@pytest.fixture(name="make_image")
def make_image_fixture():
    """Factory writing a solid-colour image of the given size to path."""
    def _make(path: Path, size=(64, 48), color=(200, 40, 40)) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(path)
        return path
    return _make


@pytest.fixture(name="make_asset")
def make_asset_fixture():
    """Factory building a SourceAsset for an existing file under root."""
    def _make(root: Path, rel: str) -> SourceAsset:
        rel_dir, _, name = rel.rpartition("/")
        return SourceAsset(
            root=root,
            rel_dir=rel_dir,
            name=name,
            mtime_ns=(root / rel).stat().st_mtime_ns,
        )
    return _make
