"""Liquid-style tag expansion for `gallery` and `series_selector` inside post bodies"""

import logging
import re
from typing import Any, Iterable, Mapping, Optional

from mdsite.config import GalleryConfig
from mdsite.core.errors import MdsiteError
from mdsite.core.gallery import GalleryBlock, render_gallery
from mdsite.core.models import Document
from mdsite.core.series import render_series_selector


logger = logging.getLogger("mdsite.tags")

GALLERY_RE = re.compile(r'\{%-?\s*gallery\s+(.*?)\s*-?%\}(.*?)\{%-?\s*endgallery\s*-?%\}', re.DOTALL)
SERIES_RE = re.compile(r'\{%-?\s*series_selector\s+(.*?)\s*-?%\}')
PLACEHOLDER_FMT = "MDSITE-TAG-{}-MDSITE"


class TagContext:
    """Configuration and documents available to tag renders."""

    def __init__(
        self,
        gallery: GalleryConfig,
        documents: Iterable[Document] = (),
        series: Optional[Mapping[str, Any]] = None,
        ):
        self.gallery = gallery
        self.documents = list(documents)
        self.series = series or {}


def _gallery(match: re.Match, ctx: TagContext, source: str) -> str:
    name, body = match.group(1).strip(), match.group(2)
    try:
        return render_gallery(name, GalleryBlock(body), ctx.gallery)
    except MdsiteError as e:
        logger.error("%s: gallery %r not rendered: %s", source, name, e)
        return ""


def _series(match: re.Match, ctx: TagContext, source: str) -> str:
    series_id = match.group(1).strip()
    try:
        return render_series_selector(series_id, ctx.documents, ctx.series)
    except MdsiteError as e:
        logger.error("%s: series %r not rendered: %s", source, series_id, e)
        return ""


def expand_tags(text: str, ctx: TagContext, source: str = "<text>", stash: list[str] = None) -> str:
    """Replace every gallery block and series_selector tag in text with its markup.

    With a stash list, each fragment is appended to it and the tag is replaced by a
    standalone placeholder line instead; see restore_tags.
    """
    def _sub(render):
        def _replace(match: re.Match) -> str:
            html = render(match, ctx, source)
            if stash is None:
                return html
            stash.append(html)
            return f"\n\n{PLACEHOLDER_FMT.format(len(stash) - 1)}\n\n"
        return _replace

    text = GALLERY_RE.sub(_sub(_gallery), text)
    return SERIES_RE.sub(_sub(_series), text)


def restore_tags(html: str, stash: list[str]) -> str:
    """Swap placeholders left by expand_tags for their fragments in rendered HTML."""
    for i, fragment in enumerate(stash):
        token = PLACEHOLDER_FMT.format(i)
        html = html.replace(f"<p>{token}</p>\n", fragment).replace(token, fragment)
    return html
