"""Content tree loading: posts with YAML frontmatter and the static file inventory"""

import re
from pathlib import Path
from typing import Any

import yaml

from mdsite.core.models import Document, SourceAsset
from mdsite.core.utils.slug import post_slug


FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
MD_EXTENSIONS = {'.md', '.markdown'}
IGNORED_FILES = {'config.yaml'}


def _strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def parse_post(path: Path, root: Path) -> Document:
    """Parse a single post file into a Document keyed by its path relative to root."""
    raw = path.read_text(encoding='utf-8')
    try:
        frontmatter, body = _strip_frontmatter(raw)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
    slug = str(frontmatter.get('slug') or post_slug(path.stem))
    return Document(
        id=path.relative_to(root).as_posix(),
        slug=slug,
        data=frontmatter,
        body=body,
    )


def load_posts(root: Path, posts_dir: str = '_posts') -> list[Document]:
    """Parse every post under root/posts_dir, in sorted path order."""
    base = root / posts_dir
    if not base.is_dir():
        return []
    files = sorted(p for p in base.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)
    return [parse_post(p, root) for p in files]


def _excluded(rel: Path, skip_dirs: set[str]) -> bool:
    """True for hidden or underscore entries and anything at or under a skip_dirs path."""
    if any(part.startswith(('.', '_')) for part in rel.parts):
        return True
    for skip in skip_dirs:
        parts = Path(skip).parts
        if parts and rel.parts[:len(parts)] == parts:
            return True
    return False


def discover_static_files(root: Path, skip_dirs: set[str] = frozenset()) -> list[SourceAsset]:
    """Return every non-markdown file under root as a SourceAsset, in sorted path order.

    Hidden and underscore-prefixed entries, config.yaml, and anything under a
    skip_dirs path (relative to root, e.g. 'build/public') are excluded.
    """
    assets = []
    for p in sorted(root.rglob('*')):
        if not p.is_file():
            continue
        rel = p.relative_to(root)
        if _excluded(rel, set(skip_dirs)) or p.suffix in MD_EXTENSIONS or rel.as_posix() in IGNORED_FILES:
            continue
        parent = rel.parent.as_posix()
        assets.append(SourceAsset(
            root=root,
            rel_dir='' if parent == '.' else parent,
            name=p.name,
            mtime_ns=p.stat().st_mtime_ns,
        ))
    return assets
