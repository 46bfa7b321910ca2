"""
Defines the command-line interface for the application using Typer.
All settings come from the environment; the options here only affect output.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from plex_export import __version__
from plex_export.api.client import PlexCatalogClient
from plex_export.core.export_manager import ExportManager
from plex_export.exceptions import CatalogError, PlexExportError
from plex_export.media.writer import ArtifactWriter
from plex_export.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_summary_panel,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("plex_export")

app = typer.Typer(
    name="plex-export",
    help=(
        "Export the metadata and artwork of a Plex library next to its media"
        " files. Configure it through the environment or a .env file."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    env_file: Path | None = typer.Option(  # noqa: B008
        None,
        "--env-file",
        help="Load environment variables from this file before reading them.",
    ),
):
    """Plex Export CLI"""
    if version:
        console.print(f"[bold]plex-export[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("plex_export").setLevel(log_level)

    ctx.obj = {"env_file": env_file}

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command(name="export")
def export_command(ctx: typer.Context):
    """Export the whole catalog into the configured export root."""
    config = ConfigManager(ctx.obj["env_file"]).load_config()

    async def _export_async():
        async with PlexCatalogClient(config) as client:
            manager = ExportManager(config, client, ArtifactWriter())
            return await manager.run()

    log.info(f"-- Starting export at {datetime.now().astimezone().isoformat()}")
    stats = asyncio.run(_export_async())
    print_summary_panel(stats, stats.elapsed_seconds)


@app.command()
def validate(ctx: typer.Context):
    """Validate the current configuration."""
    try:
        config = ConfigManager(ctx.obj["env_file"]).load_config()
        print_validation_table(config)
    except PlexExportError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def diagnose(ctx: typer.Context):
    """Diagnose common configuration and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    try:
        config = ConfigManager(ctx.obj["env_file"]).load_config()
        console.print("[green]✓[/] Configuration is valid and can be loaded.")
    except PlexExportError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    export_root = Path(config.export_root or "/")
    if export_root.is_dir():
        console.print(f"[green]✓[/] Export root exists: [dim]{export_root}[/dim]")
        root_ok = True
    else:
        console.print(f"[red]✗ Export root not found: {export_root}[/red]")
        root_ok = False

    console.print("\n[dim]Testing connectivity to the Plex server...[/dim]")

    async def test_connection() -> bool:
        async with PlexCatalogClient(config) as client:
            try:
                identity = await client.fetch_identity()
            except CatalogError as e:
                console.print(f"[red]✗ Connection test failed: {e}[/red]")
                return False
        console.print(
            "[green]✓[/] Connected to Plex server "
            f"[cyan]{identity.get('machineIdentifier', '?')}[/cyan] "
            f"(version {identity.get('version', '?')})."
        )
        return True

    connected = asyncio.run(test_connection())
    console.print()
    if connected and root_ok:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
