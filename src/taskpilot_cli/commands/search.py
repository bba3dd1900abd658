"""Search command."""

import asyncio

import typer

from taskpilot_cli.services.project_service import get_project_service
from taskpilot_cli.services.search_service import search
from taskpilot_cli.services.user_service import get_user_service
from taskpilot_cli.utils.ui.console import get_console
from taskpilot_cli.utils.ui.formatters import format_output

from .decorators import command_wrapper

console = get_console()

KIND_ICONS = {"project": "📁", "task": "📋", "user": "👤"}


@command_wrapper
async def search_command(
    query: str = typer.Argument(..., help="Text to look for"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Search project names, task titles and team members."""
    projects, users = await asyncio.gather(
        get_project_service().list_projects(),
        get_user_service().list_users(),
    )
    results = search(projects, users, query)

    if output != "pretty":
        format_output([r.model_dump() for r in results], output)
        return
    if not results:
        console.print(f"[yellow]No matches for '{query}'[/yellow]")
        return
    for result in results:
        where = f"  [dim]in #{result.project_id}[/dim]" if result.kind == "task" else ""
        console.print(f"{KIND_ICONS[result.kind]} {result.title} [dim]#{result.id}[/dim]{where}")
