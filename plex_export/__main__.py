"""
Main entry point for the plex-export application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console

from plex_export.cli.app import app
from plex_export.cli.formatters import format_error_with_suggestions
from plex_export.exceptions import PlexExportError


def main() -> None:
    """Main entry point function."""
    log = logging.getLogger("plex_export")
    console = Console()

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except asyncio.CancelledError:
        # Ctrl-C never reaches here: Click turns it into "Aborted!" and exit 1
        console.print("\n[yellow]⚠️  Export cancelled by user.[/yellow]")
        sys.exit(0)
    except PlexExportError as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
