"""Version command."""

import typer

from taskpilot_cli import __version__
from taskpilot_cli.services.config_service import get_config_service
from taskpilot_cli.utils.ui.console import get_console

console = get_console()


def version(
    short: bool = typer.Option(False, "--short", "-s", help="Print the version only"),
) -> None:
    """Show version and active context."""
    if short:
        print(__version__)
        return

    console.print(f"[bold]TaskPilot CLI[/bold] version [cyan]{__version__}[/cyan]")
    try:
        ctx = get_config_service().get_current_context()
    except (RuntimeError, ValueError) as e:
        console.print(f"[yellow]No active context: {e}[/yellow]")
        return
    console.print(f"Context: [cyan]{ctx.name}[/cyan] ([dim]{ctx.type}[/dim] {ctx.source})")
