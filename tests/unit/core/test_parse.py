"""Unit tests for core/parse.py"""

import pytest

from mdsite.core.parse import _strip_frontmatter, discover_static_files, load_posts, parse_post
from mdsite.core.utils.slug import post_slug, slugify


def test_strip_frontmatter_with_yaml():
    """_strip_frontmatter extracts YAML header and returns body."""
    fm, body = _strip_frontmatter("---\ntitle: Hello\n---\n# Body\n")
    assert fm == {"title": "Hello"}
    assert body == "# Body\n"


def test_strip_frontmatter_no_frontmatter():
    """_strip_frontmatter returns empty dict and full text when no header."""
    fm, body = _strip_frontmatter("# No frontmatter\n")
    assert fm == {}
    assert body == "# No frontmatter\n"


def test_strip_frontmatter_rejects_non_mapping():
    """A YAML list header is rejected."""
    with pytest.raises(ValueError, match="expected a mapping"):
        _strip_frontmatter("---\n- a\n---\nbody\n")


def test_parse_post_series(tmp_path):
    """parse_post keeps the series block and keys the document by relative path."""
    post = tmp_path / "_posts" / "2024-01-02-rust-part-one.md"
    post.parent.mkdir()
    post.write_text("---\ntitle: Rust 1\nseries:\n  id: rust\n  part: 1\n---\nBody.\n")
    doc = parse_post(post, tmp_path)
    assert doc.id == "_posts/2024-01-02-rust-part-one.md"
    assert doc.slug == "rust-part-one"
    assert doc.series.id == "rust"
    assert doc.body == "Body.\n"


def test_parse_post_slug_override(tmp_path):
    """A slug in front matter wins over the file name."""
    post = tmp_path / "x.md"
    post.write_text("---\nslug: custom\n---\n")
    assert parse_post(post, tmp_path).slug == "custom"


def test_parse_post_bad_yaml_names_file(tmp_path):
    """Invalid front matter errors mention the offending file."""
    post = tmp_path / "bad.md"
    post.write_text("---\ntitle: [oops\n---\n")
    with pytest.raises(ValueError, match="bad.md"):
        parse_post(post, tmp_path)


def test_load_posts_sorted(tmp_path):
    """load_posts returns markdown posts in path order and ignores other files."""
    posts = tmp_path / "_posts"
    posts.mkdir()
    (posts / "b.md").write_text("B")
    (posts / "a.markdown").write_text("A")
    (posts / "notes.txt").write_text("x")
    assert [d.id for d in load_posts(tmp_path)] == ["_posts/a.markdown", "_posts/b.md"]


def test_load_posts_missing_dir(tmp_path):
    """No posts directory means no posts."""
    assert load_posts(tmp_path) == []


def test_discover_static_files(tmp_path):
    """Static inventory skips markdown, hidden, underscore and excluded entries."""
    for rel in ["img/a.jpg", "img/deep/b.png", "c.gif", "index.md", ".git/x",
                "_posts/p.png", "_site/old-thumb.jpg", "public/y.jpg", "config.yaml"]:
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("x")
    files = discover_static_files(tmp_path, {"public"})
    assert [f.rel_path for f in files] == ["c.gif", "img/a.jpg", "img/deep/b.png"]
    assert files[1].rel_dir == "img"
    assert files[1].mtime_ns == (tmp_path / "img" / "a.jpg").stat().st_mtime_ns


@pytest.mark.parametrize("stem,expected", [
    ("2024-01-02-hello-world", "hello-world"),
    ("Hello World", "hello-world"),
    ("2024-1-2-odd", "2024-1-2-odd"),
])
def test_post_slug(stem, expected):
    """post_slug drops a leading ISO date and slugifies the rest."""
    assert post_slug(stem) == expected


def test_slugify_basic():
    """slugify converts text to a lowercase hyphenated slug."""
    assert slugify("Special! Ch@rs#") == "special-chrs"


def test_discover_static_files_nested_skip_dir(tmp_path):
    """A multi-level skip path excludes only what lies under it."""
    for rel in ["build/public/img/a.jpg", "build/notes.txt", "img/a.jpg"]:
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("x")
    files = discover_static_files(tmp_path, {"build/public"})
    assert [f.rel_path for f in files] == ["build/notes.txt", "img/a.jpg"]
