"""Project management commands."""

from datetime import datetime
from pathlib import Path

import typer

from taskpilot_cli.models import NotFoundError
from taskpilot_cli.services.ai_service import get_ai_service, suggestions_to_tasks
from taskpilot_cli.services.analytics_service import project_report
from taskpilot_cli.services.auth_service import get_auth_service
from taskpilot_cli.services.file_service import get_file_service
from taskpilot_cli.services.project_service import get_project_service
from taskpilot_cli.utils.typer_helpers import SuggestingGroup
from taskpilot_cli.utils.ui.console import get_console
from taskpilot_cli.utils.ui.formatters import (
    format_error,
    format_output,
    format_success,
    get_completion_color,
    get_progress_bar,
)

from .decorators import command_wrapper
from .utils import DATE_FORMATS, as_utc

app = typer.Typer(cls=SuggestingGroup, help="Project management commands")
console = get_console()


async def _require_project(project_id: str):
    project = await get_project_service().get_project(project_id)
    if project is None:
        raise NotFoundError(f"Project not found: {project_id}")
    return project


@app.command("list")
@command_wrapper
async def list_projects(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List projects with their completion."""
    projects = await get_project_service().list_projects()
    format_output([p.model_dump(mode="json", by_alias=True) for p in projects], output)


@app.command("get")
@command_wrapper
async def get_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show a project with its board, files and latest activity."""
    project = await _require_project(project_id)
    format_output(project.model_dump(mode="json", by_alias=True), output)


@app.command("create")
@command_wrapper
async def create_project(
    name: str = typer.Argument(..., help="Project name"),
    deadline: datetime = typer.Option(
        ..., "--deadline", "-d", formats=DATE_FORMATS, help="Project deadline"
    ),
    description: str = typer.Option("", "--description", help="Project description"),
    ai_tasks: bool = typer.Option(
        False, "--ai-tasks", help="Start with tasks suggested from the description"
    ),
) -> None:
    """Create a new project."""
    owner = await get_auth_service().current_user()

    initial_tasks = []
    if ai_tasks:
        generated = await get_ai_service().generate_tasks_for_project(description or name)
        initial_tasks = suggestions_to_tasks(generated.tasks)
        console.print(f"[dim]{len(initial_tasks)} tasks suggested[/dim]")

    project_id = await get_project_service().create_project(
        name, description, as_utc(deadline), initial_tasks, owner=owner
    )
    format_success(f"Project created: {project_id}")


@app.command("update")
@command_wrapper
async def update_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    name: str | None = typer.Option(None, "--name", help="Project name"),
    description: str | None = typer.Option(None, "--description", help="Progress notes"),
    deadline: datetime | None = typer.Option(
        None, "--deadline", "-d", formats=DATE_FORMATS, help="Project deadline"
    ),
) -> None:
    """Update project name, notes or deadline."""
    if name is None and description is None and deadline is None:
        format_error("No updates specified")
        raise typer.Exit(2)

    project = await _require_project(project_id)
    await get_project_service().update_project(
        project_id,
        name if name is not None else project.name,
        description if description is not None else project.progress_notes,
        as_utc(deadline) or project.deadline,
    )
    format_success(f"Project updated: {project_id}")


@app.command("delete")
@command_wrapper
async def delete_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a project. Uploaded files are kept."""
    if not yes and not typer.confirm(
        f"Are you sure you want to delete project {project_id}?"
    ):
        format_error("Cancelled")
        raise typer.Exit(0)

    await get_project_service().delete_project(project_id)
    format_success(f"Project deleted: {project_id}")


@app.command("attach")
@command_wrapper
async def attach_file(
    project_id: str = typer.Argument(..., help="Project ID"),
    path: Path = typer.Argument(..., help="File to upload"),
) -> None:
    """Upload a file and attach it to a project."""
    record = await get_file_service().upload_file(project_id, path)
    format_success(f"Attached {record.name} ({record.size})")
    console.print(f"  [dim]{record.url}[/dim]")


@app.command("report")
@command_wrapper
async def report(
    project_id: str = typer.Argument(..., help="Project ID"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Printable progress report of a project."""
    project = await _require_project(project_id)
    summary = project_report(project)
    if output != "pretty":
        format_output(summary.model_dump(mode="json"), output)
        return

    percentage = summary.completion_percentage
    color = get_completion_color(percentage)
    console.print(f"[bold]{summary.name}[/bold]  [dim]due {summary.deadline:%Y-%m-%d}[/dim]")
    console.print(f"[{color}]{get_progress_bar(percentage)} {percentage}%[/{color}]")
    for entry in summary.status_counts:
        console.print(f"  {entry.status.value}: {entry.count}")
    console.print()
    format_output([t.model_dump(mode="json", by_alias=True) for t in summary.tasks], output)
