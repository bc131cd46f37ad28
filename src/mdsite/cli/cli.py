"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdsite.cli.commands import build_cmd, series_cmd, thumbs_cmd


app = typer.Typer(name="mdsite", no_args_is_help=True, help="Markdown site build: thumbnails, galleries, series")

app.command(name="build")(build_cmd)
app.command(name="thumbs")(thumbs_cmd)
app.command(name="series")(series_cmd)
