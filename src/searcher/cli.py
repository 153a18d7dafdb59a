import logging
from pathlib import Path
from typing import Optional
from typing_extensions import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config.parser import ConfigurationError, load_config
from .errors import PatternError
from .models.config import SearchConfig
from .searcher import Searcher

app = typer.Typer(help="Searches for regex matches in files", add_completion=False)
err_console = Console(stderr=True, soft_wrap=True)

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"searcher {__version__}")
        raise typer.Exit()


def _configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.command()
def search(
    file_filter: Annotated[str, typer.Argument(help="The regex pattern to filter file names")],
    regex: Annotated[str, typer.Argument(help="The regex pattern to search for")],
    search_dir: Annotated[
        str, typer.Argument(help="The directory to search (defaults to current directory)")
    ] = ".",
    uncolored: Annotated[
        bool, typer.Option("--uncolored", help="Disable colored output (default: enabled)")
    ] = False,
    config: Annotated[
        Optional[Path], typer.Option("--config", "-c", help="Path to a searcher YAML settings file")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logs and a scan summary")
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit"),
    ] = None,
) -> None:
    """Search files whose names match FILE_FILTER for lines matching REGEX."""
    try:
        result = load_config(config)
    except ConfigurationError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)

    settings = result.settings
    _configure_logging(logging.DEBUG if verbose else settings.get_log_level())
    for warning in result.warnings:
        logger.warning(warning)

    search_config = SearchConfig(
        content_pattern=regex,
        file_pattern=file_filter,
        colored=settings.colored and not uncolored,
        root=search_dir,
    )

    try:
        searcher = Searcher(search_config)
    except PatternError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)

    stats = searcher.search()
    if verbose:
        err_console.print(f"[dim]{stats}[/]")


def main() -> None:
    app()
