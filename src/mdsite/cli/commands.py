"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdsite.config import CONFIG_FILE, Settings, load_config
from mdsite.core.errors import MdsiteError
from mdsite.core.parse import discover_static_files, load_posts
from mdsite.core.pipeline import run_build, run_thumbnails, skip_dirs
from mdsite.core.series import part_label, resolve_series


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _settings(source: Optional[str], overrides: dict = None) -> Settings:
    """Load config from the source tree with standard CLI error handling."""
    root = Path(source or ".")
    try:
        settings = load_config(overrides=overrides, path=root / CONFIG_FILE)
    except ValueError as e:
        _fail(str(e))
    if source is not None:
        settings = settings.model_copy(update={"source_dir": source})
    return settings


def build_cmd(
    source: Annotated[Optional[str], typer.Argument(help="Content tree root (default: current directory)")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Max concurrent thumbnail generations")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    """Run the full build: static files -> thumbnails -> series -> pages."""
    _logging(verbose)
    settings = _settings(source, overrides={"output_dir": out, "workers": workers})

    try:
        result = run_build(settings)
    except (MdsiteError, OSError, ValueError) as e:
        _fail("Build failed", e)

    for page in result.pages:
        typer.echo(f"  {page}")
    report = result.thumbnails
    for path, error in report.failures:
        typer.echo(f"  thumbnail failed: {path} ({error})", err=True)
    typer.echo(
        f"Build complete - "
        f"{len(result.pages)} page(s), "
        f"{len(result.copied)} file(s) copied, "
        f"{len(report.written)} thumbnail(s) written, "
        f"{len(report.skipped)} fresh, "
        f"{len(report.failures)} failed"
    )


def thumbs_cmd(
    source: Annotated[Optional[str], typer.Argument(help="Content tree root (default: current directory)")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Max concurrent thumbnail generations")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    """Generate stale thumbnails only."""
    _logging(verbose)
    settings = _settings(source, overrides={"output_dir": out, "workers": workers})
    root = Path(settings.source_dir)
    output_dir = root / settings.output_dir

    try:
        report = run_thumbnails(discover_static_files(root, skip_dirs(settings)), settings, output_dir)
    except (MdsiteError, OSError) as e:
        _fail("Thumbnail pass failed", e)

    for path in report.written:
        typer.echo(f"  written: {path}")
    for path, error in report.failures:
        typer.echo(f"  failed: {path} ({error})", err=True)
    typer.echo(
        f"Thumbnails - {len(report.written)} written, "
        f"{len(report.skipped)} fresh, {len(report.failures)} failed"
    )


def series_cmd(
    source: Annotated[Optional[str], typer.Argument(help="Content tree root (default: current directory)")] = None,
    ):
    """List every series and its parts in order."""
    settings = _settings(source)
    try:
        posts = load_posts(Path(settings.source_dir), settings.posts_dir)
    except (OSError, ValueError) as e:
        _fail("Could not load posts", e)

    index = resolve_series(posts)
    if not index.groups:
        typer.echo("No series found.")
        raise typer.Exit(1)
    for series_id, members in index.groups.items():
        typer.echo(series_id)
        for doc in members:
            typer.echo(f"  {doc.series.part}: {part_label(doc)} ({doc.id})")
    for dup in index.duplicates:
        typer.echo(f"Warning: {dup}", err=True)
