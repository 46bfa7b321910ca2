"""
Functions for formatting and displaying data in the console using Rich.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from plex_export.models.config import ExportConfig
from plex_export.models.stats import ExportStats
from plex_export.utils.formatting import format_duration, mask_secret


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Set PLEX_ADDRESS, X_PLEX_TOKEN and PLEX_ROOT_FOLDER in the environment.",
            "• Or put them in a .env file and pass it with --env-file.",
            "• Run `plex-export validate` to check the configuration.",
        ],
        "CatalogUnavailableError": [
            "• Check that the Plex server is running and reachable.",
            "• Your X_PLEX_TOKEN may be invalid or expired.",
            "• Run `plex-export diagnose` to test connectivity.",
        ],
        "TransientCatalogError": [
            "• The Plex server did not answer in time.",
            "• Increase PLEX_REQUEST_TIMEOUT or PLEX_MAX_RETRIES.",
        ],
        "CatalogRequestError": [
            "• The Plex server rejected the request or returned an unreadable body.",
            "• Check that X_PLEX_TOKEN grants access to the library.",
            "• Run the command with -vv for detailed logs.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_validation_table(config: ExportConfig):
    """Displays a summary of the current settings, hiding the token."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Server:", config.server_address)
    table.add_row("Token:", f"[dim]{mask_secret(config.auth_token)}[/dim]")
    table.add_row("Export Root:", config.export_root or "/")
    table.add_row("Run Tag:", config.run_tag)
    table.add_row("Section Kinds:", ", ".join(sorted(config.supported_kinds)))
    table.add_row(
        "Retries:", f"{config.max_retries} (base delay {config.retry_base_delay}s)"
    )
    table.add_row("Request Timeout:", f"{config.request_timeout}s")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(stats: ExportStats, duration_s: float):
    """Displays the final summary of the export session."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Sections:", f"[bold green]{stats.sections_exported}[/bold green]"
    )
    stats_table.add_row("✓ Items:", f"[bold green]{stats.items_exported}[/bold green]")
    stats_table.add_row(
        "✓ Documents:", f"[green]{stats.documents_written}[/green]"
    )
    stats_table.add_row("✓ Assets:", f"[green]{stats.assets_written}[/green]")

    if stats.sections_skipped > 0:
        stats_table.add_row(
            "○ Skipped Sections:", f"[yellow]{stats.sections_skipped}[/yellow]"
        )
    if stats.seasons_without_episodes > 0:
        stats_table.add_row(
            "○ Empty Seasons:", f"[yellow]{stats.seasons_without_episodes}[/yellow]"
        )

    failures = (
        ("✗ Failed Sections:", stats.sections_failed),
        ("✗ Failed Items:", stats.items_failed),
        ("✗ Failed Documents:", stats.documents_failed),
        ("✗ Failed Assets:", stats.assets_failed),
    )
    for label, count in failures:
        if count > 0:
            stats_table.add_row(label, f"[bold red]{count}[/bold red]")

    stats_table.add_row("", "")  # Spacer
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    if stats.has_failures:
        title = "⚠ [bold]Export Finished With Errors[/bold]"
        border_color = "yellow"
    else:
        title = "📼 [bold]Export Complete![/bold]"
        border_color = "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
