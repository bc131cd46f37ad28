"""Derived thumbnail cache: mtime freshness check and crop-to-fill generation"""

import logging
import os
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from mdsite.core.errors import DecodeError
from mdsite.core.models import SourceAsset


logger = logging.getLogger("mdsite.assets")


def needs_generation(source: SourceAsset, dest_path: Path) -> bool:
    """True unless dest_path exists and its mtime is not older than the source's."""
    try:
        return dest_path.stat().st_mtime_ns < source.mtime_ns
    except FileNotFoundError:
        return True


def resize_to_fill(img: Image.Image, width: int, height: int) -> Image.Image:
    """Scale and center-crop img to exactly width x height, cropping the excess."""
    w, h = img.size
    scale = max(width / w, height / h)
    crop_w = max(1, min(w, round(width / scale)))
    crop_h = max(1, min(h, round(height / scale)))
    left = (w - crop_w) // 2
    top = (h - crop_h) // 2
    img = img.crop((left, top, left + crop_w, top + crop_h))
    return img.resize((width, height), Image.LANCZOS)


def _open(path: Path) -> Image.Image:
    """Fully load an image, mapping read failures to DecodeError."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise DecodeError(path, e) from e


def generate(source: SourceAsset, dest_path: Path, width: int, height: int) -> None:
    """Write a width x height thumbnail of source to dest_path, stamped with the source mtime.

    Any existing destination file is replaced. Raises DecodeError when the source
    cannot be decoded; the destination is left absent in that case.
    """
    img = _open(source.path)

    if dest_path.exists():
        dest_path.unlink()
    dest_path.parent.mkdir(parents=True, exist_ok=True)

    thumb = resize_to_fill(img, width, height)
    if thumb.mode not in ("RGB", "L") and dest_path.suffix.lower() in (".jpg", ".jpeg"):
        thumb = thumb.convert("RGB")
    thumb.save(dest_path)

    # Output mtime must equal the source mtime; needs_generation compares against it.
    os.utime(dest_path, ns=(source.mtime_ns, source.mtime_ns))
    logger.debug("thumbnail %s -> %s (%dx%d)", source.rel_path, dest_path, width, height)
