"""Unit tests for core/discovery.py"""

import threading

import pytest
from PIL import Image

from mdsite.core import assets
from mdsite.core.discovery import ThumbnailRegistry, is_candidate
from mdsite.core.errors import ConfigMissing, DecodeError
from mdsite.core.models import SourceAsset


def _asset(root, name, mtime_ns=0):
    return SourceAsset(root=root, rel_dir="", name=name, mtime_ns=mtime_ns)


def test_discovery_filter_exact_extension_set(tmp_path):
    """Only .jpg and .png register; .gif and upper-case .JPG do not."""
    files = [_asset(tmp_path, n) for n in ["a.jpg", "b.png", "c.gif", "d.JPG"]]
    registry = ThumbnailRegistry()
    registry.register(files)
    assert {t.source.name for t in registry} == {"a.jpg", "b.png"}


def test_jpg_is_a_candidate(tmp_path):
    """.jpg matches on its own, not only .png."""
    assert is_candidate(_asset(tmp_path, "only.jpg"))
    assert not is_candidate(_asset(tmp_path, "photo.jpeg"))


def test_register_is_idempotent(tmp_path):
    """Registering the same inventory twice keeps one entry per source path."""
    files = [_asset(tmp_path, "a.jpg"), _asset(tmp_path, "b.png")]
    registry = ThumbnailRegistry()
    assert len(registry.register(files)) == 2
    assert registry.register(files) == []
    assert len(registry) == 2


def test_register_uses_configured_size(tmp_path):
    """Entries carry the registry's width and height."""
    registry = ThumbnailRegistry(150, 120)
    (thumb,) = registry.register([_asset(tmp_path, "a.jpg")])
    assert (thumb.width, thumb.height) == (150, 120)


@pytest.mark.parametrize("width,height", [(None, 100), (100, None)])
def test_missing_dimension_raises(width, height):
    """A None thumbnail dimension is a ConfigMissing error."""
    with pytest.raises(ConfigMissing):
        ThumbnailRegistry(width, height)


def test_write_all_then_fresh(tmp_path, make_image, make_asset):
    """A second pass over unchanged sources writes nothing."""
    src, out = tmp_path / "src", tmp_path / "out"
    make_image(src / "a.jpg")
    make_image(src / "sub" / "b.png")
    registry = ThumbnailRegistry(20, 20)
    registry.register([make_asset(src, "a.jpg"), make_asset(src, "sub/b.png")])

    first = registry.write_all(out, workers=2)
    assert sorted(first.written) == ["a-thumb.jpg", "sub/b-thumb.png"]
    assert (out / "sub" / "b-thumb.png").exists()

    second = registry.write_all(out, workers=2)
    assert second.written == []
    assert sorted(second.skipped) == ["a-thumb.jpg", "sub/b-thumb.png"]


def test_write_all_isolates_failures(tmp_path, make_image, make_asset):
    """A corrupt image is reported while its siblings are still generated."""
    src, out = tmp_path / "src", tmp_path / "out"
    make_image(src / "good1.jpg")
    (src / "bad.jpg").write_bytes(b"garbage")
    make_image(src / "good2.png")
    registry = ThumbnailRegistry(10, 10)
    registry.register([make_asset(src, n) for n in ["good1.jpg", "bad.jpg", "good2.png"]])

    report = registry.write_all(out, workers=3)

    assert not report.ok
    assert [path for path, _ in report.failures] == ["bad.jpg"]
    assert sorted(report.written) == ["good1-thumb.jpg", "good2-thumb.png"]


def test_write_all_empty_registry(tmp_path):
    """An empty registry yields an empty, successful report."""
    report = ThumbnailRegistry().write_all(tmp_path)
    assert report.ok
    assert report.written == report.skipped == []


def test_write_one_serializes_same_destination(tmp_path, make_image, make_asset, monkeypatch):
    """Concurrent writes of one destination never overlap."""
    make_image(tmp_path / "src" / "a.jpg")
    registry = ThumbnailRegistry(10, 10)
    (thumb,) = registry.register([make_asset(tmp_path / "src", "a.jpg")])

    active = []
    overlap = []
    real_generate = assets.generate

    def tracking_generate(*args):
        active.append(1)
        if len(active) > 1:
            overlap.append(True)
        try:
            real_generate(*args)
        finally:
            active.pop()

    monkeypatch.setattr(assets, "generate", tracking_generate)
    threads = [threading.Thread(target=registry.write_one, args=(thumb, tmp_path / "out")) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert not overlap
    assert (tmp_path / "out" / "a-thumb.jpg").exists()


def test_write_all_reports_oversized_image(tmp_path, make_image, make_asset, monkeypatch):
    """An image over Pillow's pixel limit is a reported failure, not an aborted pass."""
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    src, out = tmp_path / "src", tmp_path / "out"
    make_image(src / "good.jpg", size=(10, 10))
    make_image(src / "huge.jpg", size=(64, 48))
    registry = ThumbnailRegistry(5, 5)
    registry.register([make_asset(src, "good.jpg"), make_asset(src, "huge.jpg")])

    report = registry.write_all(out, workers=2)

    assert report.written == ["good-thumb.jpg"]
    assert [path for path, _ in report.failures] == ["huge.jpg"]
    assert isinstance(report.failures[0][1], DecodeError)
