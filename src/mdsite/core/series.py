"""Post series: two-phase resolution into ordered groups, and series list rendering"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from markupsafe import escape

from mdsite.core.errors import DuplicateSeriesPart
from mdsite.core.models import Document


logger = logging.getLogger("mdsite.series")


@dataclass
class SeriesIndex:
    """Resolved series: series id -> ordered members, plus document id -> series id."""
    groups:      dict[str, list[Document]] = field(default_factory=dict)
    by_document: dict[str, str] = field(default_factory=dict)
    duplicates:  list[DuplicateSeriesPart] = field(default_factory=list)

    def __contains__(self, series_id: str) -> bool:
        return series_id in self.groups

    def series_posts(self, doc: Document) -> Optional[list[Document]]:
        """Ordered members of doc's series, or None when doc belongs to none."""
        series_id = self.by_document.get(doc.id)
        if series_id is None:
            return None
        return self.groups[series_id]


def _ordered(members: list[Document]) -> list[Document]:
    # sorted() is stable, so tied parts keep document inventory order.
    return sorted(members, key=lambda d: d.series.part)


def _duplicates(series_id: str, members: list[Document]) -> list[DuplicateSeriesPart]:
    by_part: dict[int, list[str]] = defaultdict(list)
    for doc in members:
        by_part[doc.series.part].append(doc.id)
    return [
        DuplicateSeriesPart(series_id, part, paths)
        for part, paths in by_part.items() if len(paths) > 1
    ]


def resolve_series(documents: Iterable[Document]) -> SeriesIndex:
    """Group documents by series id and order each group by part ascending.

    Documents without series metadata belong to no group. Documents are never
    modified; back-references live in the returned index.
    """
    grouped: dict[str, list[Document]] = {}
    for doc in documents:
        entry = doc.series
        if entry is None:
            continue
        grouped.setdefault(entry.id, []).append(doc)

    index = SeriesIndex()
    for series_id, members in grouped.items():
        ordered = _ordered(members)
        index.groups[series_id] = ordered
        for doc in ordered:
            index.by_document[doc.id] = series_id
        for dup in _duplicates(series_id, ordered):
            logger.warning("%s", dup)
            index.duplicates.append(dup)

    logger.debug("resolved %d series over %d post(s)", len(index.groups), len(index.by_document))
    return index


def part_label(doc: Document) -> str:
    """short_title if set, else the document title."""
    entry = doc.series
    return (entry.short_title if entry else None) or doc.title


def render_series_list(posts: Iterable[Document]) -> str:
    """Wrap one `series_part` block per post in a `series_container`."""
    parts = ['<div class="series_container">\n']
    for doc in posts:
        parts.append('<div class="series_part">\n')
        parts.append(str(escape(part_label(doc))))
        parts.append("</div>\n")
    parts.append("</div>\n")
    return "".join(parts)


def render_series_selector(
    series_id: str,
    documents: Iterable[Document],
    series_config: Optional[Mapping[str, Any]] = None,
    ) -> str:
    """Tag form: collect and order the posts of series_id without a prior resolve pass."""
    series_id = series_id.strip()
    if series_config is not None and series_id not in series_config:
        logger.debug("series %r has no entry in the series registry", series_id)
    members = [d for d in documents if d.series is not None and d.series.id == series_id]
    return render_series_list(_ordered(members))


def render_document_series(doc: Document, index: SeriesIndex) -> str:
    """Per-document form: the series list for doc, or '' when doc has no series."""
    posts = index.series_posts(doc)
    if posts is None:
        return ""
    return render_series_list(posts)
