"""Gallery tag: `path :: caption` body parsing and HTML fragment rendering"""

import logging
import re
from typing import Iterable, Iterator

from markupsafe import escape

from mdsite.config import GalleryConfig
from mdsite.core.errors import ConfigMissing, ParseAmbiguity
from mdsite.core.models import GalleryItem, thumb_name


logger = logging.getLogger("mdsite.gallery")

SEPARATOR_RE = re.compile(r"\s*::\s*")
CLEARFIX_MODULUS = 4


def parse_gallery(text: str) -> Iterator[list[str]]:
    """Yield [path, caption] pairs from a gallery body, one per non-blank line.

    A line without a separator yields a single-element list.
    """
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        yield [field.strip() for field in SEPARATOR_RE.split(line)]


class GalleryBlock:
    """A gallery body that can be iterated any number of times."""

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[list[str]]:
        return parse_gallery(self.text)


def build_items(pairs: Iterable[list[str]], config: GalleryConfig) -> list[GalleryItem]:
    """Resolve parsed pairs to GalleryItems with full-size and thumbnail URLs."""
    if config.url is None:
        raise ConfigMissing("gallerytag.url")
    items = []
    for pair in pairs:
        if len(pair) < 2:
            logger.debug("%s", ParseAmbiguity(pair[0]))
        path = pair[0]
        caption = pair[1] if len(pair) > 1 else ""
        items.append(GalleryItem(
            path=path,
            caption=caption,
            url=f"{config.url}/{path}",
            thumbnail_url=f"{config.url}/{thumb_name(path)}",
        ))
    return items


def render_gallery(name: str, items: Iterable, config: GalleryConfig) -> str:
    """Render a named gallery as an HTML fragment.

    items may be parsed [path, caption] pairs or GalleryItems. The clear-fix
    marker follows a fixed modulus of 4 regardless of config.columns.
    """
    items = list(items)
    if items and not isinstance(items[0], GalleryItem):
        items = build_items(items, config)
    elif config.url is None:
        raise ConfigMissing("gallerytag.url")

    group = escape(name)
    parts = []
    for item in items:
        parts.append('<dl class="gallery-item">\n')
        parts.append(
            f'<a class="gallery-link" rel="{group}" href="{escape(item.url)}" '
            f'title="{escape(item.caption)}" data-lightbox="{group}">'
        )
        parts.append(f'<img src="{escape(item.thumbnail_url)}" class="thumbnail" width="150" height="150" />\n')
        parts.append("</a>\n")
        parts.append("</dl>\n\n")
    if len(items) % CLEARFIX_MODULUS != 0:
        parts.append('<br style="clear: both;">')

    return f'<div class="gallery">\n\n{"".join(parts)}\n\n</div>\n'
