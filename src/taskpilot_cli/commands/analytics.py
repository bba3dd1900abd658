"""Dashboard and analytics commands."""

import typer

from taskpilot_cli.services import analytics_service
from taskpilot_cli.services.project_service import get_project_service
from taskpilot_cli.utils.typer_helpers import SuggestingGroup
from taskpilot_cli.utils.ui.console import get_console
from taskpilot_cli.utils.ui.formatters import (
    format_output,
    get_completion_color,
    get_progress_bar,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Dashboard and analytics")
console = get_console()


@app.command("overview")
@command_wrapper
async def overview(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Overall completion and tasks per status."""
    dashboard = await get_project_service().get_dashboard()
    summary = dashboard.summary

    if output != "pretty":
        data = summary.model_dump(mode="json")
        data["status_breakdown"] = [
            entry.model_dump(mode="json") for entry in dashboard.status_breakdown
        ]
        format_output(data, output)
        return

    percentage = summary.completion_percentage
    color = get_completion_color(percentage)
    console.print("📊 [bold cyan]Dashboard[/bold cyan]")
    console.print(
        f"  {summary.project_count} projects • {summary.task_count} tasks"
        f" • {summary.done_count} done"
    )
    console.print(f"  [{color}]{get_progress_bar(percentage)} {percentage}%[/{color}]")
    console.print()
    for entry in dashboard.status_breakdown:
        console.print(f"  {entry.status.value:<12} {entry.count:>4}")


@app.command("distribution")
@command_wrapper
async def distribution(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """To-do, In Progress and Done counts per project."""
    projects = await get_project_service().list_projects()
    rows = analytics_service.task_distribution(projects)
    format_output([row.model_dump(mode="json") for row in rows], output)


@app.command("activity")
@command_wrapper
async def activity(
    limit: int = typer.Option(5, "--limit", "-n", min=1, help="Number of entries"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Latest activity across all projects."""
    projects = await get_project_service().list_projects()
    entries = analytics_service.recent_activity(projects, limit)
    format_output(
        [
            {
                **entry.activity.model_dump(mode="json", by_alias=True),
                "project_id": entry.project_id,
                "project_name": entry.project_name,
            }
            for entry in entries
        ],
        output,
    )
