"""CLI entry point for podsite."""

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from podsite.builder import SiteBuilder
from podsite.capabilities import Capabilities
from podsite.config.logging import setup_logging
from podsite.config.manager import ConfigManager
from podsite.output.manager import WriteMode
from podsite.utils.errors import (
    InvalidConfigError,
    PodsiteError,
    TemplateNotFoundError,
)
from podsite.utils.text import to_text

app = typer.Typer(
    name="podsite",
    help="Build a static podcast site: RSS feed, chapter files and episode pages",
    no_args_is_help=True,
)
# stdout carries only the composed feed
console = Console(stderr=True)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
) -> None:
    """podsite - Static podcast site generator."""
    ctx.obj = {"verbose": verbose, "log_file": log_file}
    setup_logging(verbose=verbose, log_file=log_file)


def _apply_log_level(ctx: typer.Context, level: str) -> None:
    """Re-apply logging with the configured level unless --verbose is set."""
    options = ctx.obj or {}
    if not options.get("verbose"):
        setup_logging(log_file=options.get("log_file"), level=level)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from podsite import __version__

    typer.echo(f"podsite v{__version__}")


@app.command("build")
def build_command(
    ctx: typer.Context,
    root: Path = typer.Argument(
        Path("."), help="Project directory", file_okay=False, exists=True
    ),
    compose: bool = typer.Option(
        False, "--compose", help="Print the feed to stdout without writing any files"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output directory (default: docs)"
    ),
    html_policy: str | None = typer.Option(
        None,
        "--html-policy",
        help="Episode pages: 'regenerate' (default) or 'create-if-absent'",
    ),
) -> None:
    """Build the feed, chapter files and episode pages.

    Examples:
        podsite build

        podsite build ./my-podcast --output public

        podsite build --compose > podcast.xml
    """
    mode = WriteMode.COMPOSE if compose else WriteMode.PUBLISH

    try:
        settings = ConfigManager(root).load_settings(
            output_dir=output, html_page_policy=html_policy
        )
        _apply_log_level(ctx, settings.log_level)
        builder = SiteBuilder(
            root, settings=settings, mode=mode, capabilities=Capabilities.detect()
        )
        result = builder.build()

    except TemplateNotFoundError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)
    except InvalidConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)
    except PodsiteError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]✗[/red] Could not write output: {e}")
        sys.exit(1)

    if compose:
        sys.stdout.write(result.document)
        return

    console.print(
        f"[green]✓[/green] Built [bold]{len(result.episodes)}[/bold] episode(s)"
    )
    if result.feed_path is not None:
        console.print(f"[dim]  Feed: {result.feed_path}[/dim]")
    console.print(f"[dim]  Files written: {len(result.written)}[/dim]")
    if result.skipped:
        console.print(
            f"[yellow]⚠[/yellow] Skipped: {', '.join(result.skipped)}"
        )


@app.command("list")
def list_episodes(
    root: Path = typer.Argument(
        Path("."), help="Project directory", file_okay=False, exists=True
    ),
) -> None:
    """List episodes with their derived fields.

    Runs a compose-only build, so nothing on disk changes.
    """
    try:
        result = SiteBuilder(
            root, mode=WriteMode.COMPOSE, capabilities=Capabilities.detect()
        ).build()
    except PodsiteError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)

    if not result.episodes:
        console.print("[yellow]No episodes found.[/yellow]")
        return

    table = Table(title="[bold]Episodes[/bold]")
    table.add_column("Directory", style="cyan", no_wrap=True)
    table.add_column("Season", justify="right")
    table.add_column("Episode", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Duration", style="green")
    table.add_column("Categories", style="blue")

    for episode in result.episodes:
        fields = episode.fields
        table.add_row(
            episode.directory_name,
            to_text(fields.get("ITEM_SEASON") or "-"),
            to_text(fields.get("ITEM_EPISODE") or "-"),
            episode.title,
            to_text(fields.get("ITEM_DURATION") or "-"),
            ", ".join(episode.categories) or "-",
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(result.episodes)} episode(s)[/dim]")
    if result.skipped:
        console.print(f"[yellow]⚠[/yellow] Skipped: {', '.join(result.skipped)}")


if __name__ == "__main__":
    app()
