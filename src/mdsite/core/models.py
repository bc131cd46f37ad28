"""Build-scoped data models: static files, derived thumbnails, gallery items, documents"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError


THUMB_SUFFIX = "-thumb"


def thumb_name(path: str) -> str:
    """Insert the thumbnail suffix before the extension: 'a/photo.jpg' -> 'a/photo-thumb.jpg'."""
    head, sep, name = path.rpartition("/")
    stem, ext = os.path.splitext(name)
    return f"{head}{sep}{stem}{THUMB_SUFFIX}{ext}"


@dataclass(frozen=True)
class SourceAsset:
    """A static file known to the build; read-only to the core."""
    root:     Path              # content tree root
    rel_dir:  str               # directory relative to root, "" for top level
    name:     str               # file name with extension
    mtime_ns: int               # last modification time

    @property
    def extname(self) -> str:
        return os.path.splitext(self.name)[1]

    @property
    def rel_path(self) -> str:
        return f"{self.rel_dir}/{self.name}" if self.rel_dir else self.name

    @property
    def path(self) -> Path:
        return self.root / self.rel_path

    def destination(self, dest_root: Path) -> Path:
        return dest_root / self.rel_path

    def write(self, dest_root: Path) -> bool:
        """Copy into dest_root mirroring rel_path. Returns False when the copy is already fresh."""
        dest = self.destination(dest_root)
        if dest.exists() and dest.stat().st_mtime_ns >= self.mtime_ns:
            return False
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(self.path, dest)
        return True


@dataclass(frozen=True)
class DerivedThumbnail:
    """One thumbnail per eligible SourceAsset; dest path is a pure function of the source path."""
    source: SourceAsset
    width:  int
    height: int

    @property
    def rel_path(self) -> str:
        return thumb_name(self.source.rel_path)

    def destination(self, dest_root: Path) -> Path:
        return dest_root / self.rel_path


@dataclass(frozen=True)
class GalleryItem:
    """One parsed gallery line with its computed URLs."""
    path:          str
    caption:       str
    url:           str
    thumbnail_url: str


class SeriesEntry(BaseModel):
    """The `series` front matter block of a post."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    id:          str
    part:        int
    short_title: Optional[str] = None


@dataclass(frozen=True)
class Document:
    """A post: immutable front matter plus body, keyed by its source path."""
    id:    str                                   # source path relative to the content root
    slug:  str
    data:  dict[str, Any] = field(default_factory=dict)
    body:  str = ""

    @property
    def title(self) -> str:
        return str(self.data.get("title") or self.slug)

    @property
    def series(self) -> Optional[SeriesEntry]:
        """Parsed series metadata, or None when absent or malformed."""
        raw = self.data.get("series")
        if not isinstance(raw, dict) or raw.get("id") is None or raw.get("part") is None:
            return None
        try:
            return SeriesEntry(id=str(raw["id"]), part=raw["part"], short_title=raw.get("short_title"))
        except ValidationError:
            return None
