"""Build orchestration: static files and thumbnails, then series resolve, then page render"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from markdown_it import MarkdownIt
from markupsafe import escape

from mdsite.config import Settings
from mdsite.core.discovery import ThumbnailRegistry, ThumbnailReport
from mdsite.core.errors import ConfigMissing
from mdsite.core.models import Document, SourceAsset
from mdsite.core.parse import discover_static_files, load_posts
from mdsite.core.series import SeriesIndex, render_document_series, resolve_series
from mdsite.core.tags import TagContext, expand_tags, restore_tags
from mdsite.core.utils.slug import slugify


logger = logging.getLogger("mdsite.pipeline")


@dataclass
class BuildResult:
    """Summary of one build run."""
    pages:      list[Path] = field(default_factory=list)
    copied:     list[str] = field(default_factory=list)
    thumbnails: ThumbnailReport = field(default_factory=ThumbnailReport)
    series:     SeriesIndex = field(default_factory=SeriesIndex)


def _make_parser() -> MarkdownIt:
    """Build a CommonMark MarkdownIt instance with raw HTML passthrough."""
    return MarkdownIt("commonmark", options_update={"linkify": False, "html": True})


def skip_dirs(settings: Settings) -> set[str]:
    """Directories, relative to source_dir, excluded from the static file inventory."""
    root = Path(settings.source_dir).resolve()
    skipped = set()
    for name in (settings.output_dir, settings.posts_dir):
        path = (root / name).resolve()
        if path == root or not path.is_relative_to(root):
            continue
        skipped.add(path.relative_to(root).as_posix())
    return skipped


def run_thumbnails(
    static_files: list[SourceAsset],
    settings: Settings,
    output_dir: Path,
    ) -> ThumbnailReport:
    """Discover thumbnail candidates and generate every stale one under output_dir."""
    registry = ThumbnailRegistry(settings.gallerytag.thumb_width, settings.gallerytag.thumb_height)
    registry.register(static_files)
    return registry.write_all(output_dir, settings.workers)


def page_name(doc: Document, used: set[str]) -> Optional[str]:
    """Output file name for doc; a slug already taken falls back to the full file stem.

    Returns None when the fallback is taken too.
    """
    name = f"{doc.slug}.html"
    if name in used:
        fallback = f"{slugify(Path(doc.id).stem)}.html"
        logger.warning("%s: page %s already written, using %s", doc.id, name, fallback)
        name = fallback
    if name in used:
        logger.error("%s: page %s collides with another post, not written", doc.id, name)
        return None
    used.add(name)
    return name


def render_page(doc: Document, ctx: TagContext, index: SeriesIndex, parser: MarkdownIt) -> str:
    """Render one post to a standalone HTML page with its series list."""
    stash: list[str] = []
    body = expand_tags(doc.body, ctx, source=doc.id, stash=stash)
    body_html = restore_tags(parser.render(body), stash)
    title = escape(doc.title)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{title}</title>\n</head>\n<body>\n<article>\n<h1>{title}</h1>\n"
        f"{render_document_series(doc, index)}"
        f"{body_html}"
        "</article>\n</body>\n</html>\n"
    )


def run_build(settings: Settings) -> BuildResult:
    """Run a full build. Series are resolved over every post before any page renders."""
    source_dir = Path(settings.source_dir)
    output_dir = source_dir / settings.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    result = BuildResult()

    # --- static files + thumbnails ---
    static_files = discover_static_files(source_dir, skip_dirs(settings))
    for asset in static_files:
        if asset.write(output_dir):
            result.copied.append(asset.rel_path)
    try:
        result.thumbnails = run_thumbnails(static_files, settings, output_dir)
    except ConfigMissing as e:
        logger.error("thumbnail pass skipped: %s", e)

    # --- resolve ---
    posts = load_posts(source_dir, settings.posts_dir)
    result.series = resolve_series(posts)

    # --- render ---
    ctx = TagContext(settings.gallerytag, posts, settings.series)
    parser = _make_parser()
    used: set[str] = set()
    for doc in posts:
        name = page_name(doc, used)
        if name is None:
            continue
        page = output_dir / name
        page.write_text(render_page(doc, ctx, result.series, parser), encoding="utf-8")
        result.pages.append(page)

    logger.info(
        "build complete: %d page(s), %d file(s) copied, %d thumbnail(s) written",
        len(result.pages), len(result.copied), len(result.thumbnails.written),
    )
    return result
