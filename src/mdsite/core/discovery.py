"""Thumbnail candidate discovery and the per-build thumbnail pass"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from mdsite.core import assets
from mdsite.core.errors import ConfigMissing, DecodeError
from mdsite.core.models import DerivedThumbnail, SourceAsset


logger = logging.getLogger("mdsite.discovery")

# Exact, case-sensitive match on the stored extension.
THUMB_EXTENSIONS = frozenset({".jpg", ".png"})


def is_candidate(asset: SourceAsset) -> bool:
    """True when the asset's extension is one of THUMB_EXTENSIONS."""
    return asset.extname in THUMB_EXTENSIONS


@dataclass
class ThumbnailReport:
    """Outcome of a thumbnail pass."""
    written:  list[str] = field(default_factory=list)
    skipped:  list[str] = field(default_factory=list)
    failures: list[tuple[str, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class ThumbnailRegistry:
    """Derived thumbnails registered for one build, keyed by source path."""

    def __init__(self, width: Optional[int] = 100, height: Optional[int] = 100):
        if width is None:
            raise ConfigMissing("gallerytag.thumb_width")
        if height is None:
            raise ConfigMissing("gallerytag.thumb_height")
        self.width = width
        self.height = height
        self._entries: dict[str, DerivedThumbnail] = {}
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())

    @property
    def entries(self) -> list[DerivedThumbnail]:
        return list(self._entries.values())

    def register(self, files: Iterable[SourceAsset]) -> list[DerivedThumbnail]:
        """Register a thumbnail for every candidate in files. Returns only newly added entries.

        Registration is keyed by source path, so repeated calls never duplicate.
        """
        added = []
        for asset in files:
            if not is_candidate(asset) or asset.rel_path in self._entries:
                continue
            thumb = DerivedThumbnail(source=asset, width=self.width, height=self.height)
            self._entries[asset.rel_path] = thumb
            added.append(thumb)
        if added:
            logger.debug("registered %d thumbnail(s)", len(added))
        return added

    def _lock_for(self, dest: Path) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(dest, threading.Lock())

    def write_one(self, thumb: DerivedThumbnail, dest_root: Path) -> bool:
        """Generate one thumbnail under dest_root if stale. Returns True when a file was written."""
        dest = thumb.destination(dest_root)
        with self._lock_for(dest):
            if not assets.needs_generation(thumb.source, dest):
                return False
            assets.generate(thumb.source, dest, thumb.width, thumb.height)
            return True

    def write_all(self, dest_root: Path, workers: int = 1) -> ThumbnailReport:
        """Generate every stale thumbnail; one failure never stops the others."""
        report = ThumbnailReport()
        thumbs = self.entries
        if not thumbs:
            return report

        def _run(thumb: DerivedThumbnail):
            try:
                return thumb, self.write_one(thumb, dest_root), None
            except (DecodeError, OSError) as e:
                return thumb, False, e

        with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
            results = list(pool.map(_run, thumbs))

        for thumb, written, error in results:
            if error is not None:
                logger.warning("skipping thumbnail for %s: %s", thumb.source.rel_path, error)
                report.failures.append((thumb.source.rel_path, error))
            elif written:
                report.written.append(thumb.rel_path)
            else:
                report.skipped.append(thumb.rel_path)

        logger.info(
            "thumbnails: %d written, %d fresh, %d failed",
            len(report.written), len(report.skipped), len(report.failures),
        )
        return report
