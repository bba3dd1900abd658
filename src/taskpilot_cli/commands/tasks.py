"""Task management commands.

Tasks live inside projects, so every command takes the project ID first.
"""

from datetime import datetime

import typer

from taskpilot_cli.models import NotFoundError, TaskCreate, User
from taskpilot_cli.services.auth_service import get_auth_service
from taskpilot_cli.services.project_service import get_project_service
from taskpilot_cli.services.task_service import get_task_service
from taskpilot_cli.services.user_service import get_user_service
from taskpilot_cli.utils.typer_helpers import SuggestingGroup
from taskpilot_cli.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper
from .utils import DATE_FORMATS, as_utc, parse_priority, parse_status

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")


async def _resolve_user(user_id: str | None) -> User | None:
    if user_id is None:
        return None
    user = await get_user_service().get_user(user_id)
    if user is None:
        raise NotFoundError(f"User not found: {user_id}")
    return user


@app.command("list")
@command_wrapper
async def list_tasks(
    project_id: str = typer.Argument(..., help="Project ID"),
    status: str | None = typer.Option(None, "--status", "-s", help="Only this status"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List the tasks of a project."""
    wanted = parse_status(status) if status else None
    project = await get_project_service().get_project(project_id)
    if project is None:
        raise NotFoundError(f"Project not found: {project_id}")

    tasks = [t for t in project.tasks if wanted is None or t.status == wanted]
    format_output([t.model_dump(mode="json", by_alias=True) for t in tasks], output)


@app.command("add")
@command_wrapper
async def add_task(
    project_id: str = typer.Argument(..., help="Project ID"),
    title: str = typer.Argument(..., help="Task title"),
    priority: str = typer.Option("Medium", "--priority", "-p", help="Low, Medium or High"),
    status: str = typer.Option("To-do", "--status", "-s", help="Board column"),
    due: datetime | None = typer.Option(None, "--due", formats=DATE_FORMATS, help="Due date"),
    assignee: str | None = typer.Option(None, "--assignee", "-a", help="Assignee user ID"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Add a task to a project."""
    task_data = TaskCreate(
        title=title,
        priority=parse_priority(priority),
        status=parse_status(status),
        due_date=as_utc(due),
        assignee=await _resolve_user(assignee),
    )
    actor = await get_auth_service().current_user()

    task = await get_task_service().add_task(project_id, task_data, actor)
    format_success(f"Task added: {task.id}")
    format_output(task.model_dump(mode="json", by_alias=True), output)


@app.command("update")
@command_wrapper
async def update_task(
    project_id: str = typer.Argument(..., help="Project ID"),
    task_id: str = typer.Argument(..., help="Task ID"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    priority: str | None = typer.Option(None, "--priority", "-p", help="Low, Medium or High"),
    status: str | None = typer.Option(None, "--status", "-s", help="Board column"),
    due: datetime | None = typer.Option(None, "--due", formats=DATE_FORMATS, help="Due date"),
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date"),
    assignee: str | None = typer.Option(None, "--assignee", "-a", help="Assignee user ID"),
    unassign: bool = typer.Option(False, "--unassign", help="Remove the assignee"),
) -> None:
    """Edit a task."""
    changes = {}
    if title is not None:
        if not title.strip():
            raise ValueError("Task title cannot be empty")
        changes["title"] = title
    if priority is not None:
        changes["priority"] = parse_priority(priority)
    if status is not None:
        changes["status"] = parse_status(status)
    if clear_due:
        changes["due_date"] = None
    elif due is not None:
        changes["due_date"] = as_utc(due)
    if unassign:
        changes["assignee"] = None
    elif assignee is not None:
        changes["assignee"] = await _resolve_user(assignee)

    if not changes:
        format_error("No updates specified")
        raise typer.Exit(2)

    actor = await get_auth_service().current_user()
    await get_task_service().edit_task(project_id, task_id, changes, actor)
    format_success(f"Task updated: {task_id}")


@app.command("move")
@command_wrapper
async def move_task(
    project_id: str = typer.Argument(..., help="Project ID"),
    task_id: str = typer.Argument(..., help="Task ID"),
    status: str = typer.Argument(..., help="Backlog, To-do, In Progress or Done"),
) -> None:
    """Move a task to another board column."""
    new_status = parse_status(status)
    actor = await get_auth_service().current_user()

    task = await get_task_service().move_task(project_id, task_id, new_status, actor)
    format_success(f"Moved '{task.title}' to {new_status.value}")


@app.command("assign")
@command_wrapper
async def assign_task(
    project_id: str = typer.Argument(..., help="Project ID"),
    task_id: str = typer.Argument(..., help="Task ID"),
    user_id: str | None = typer.Argument(None, help="Assignee user ID (omit to unassign)"),
) -> None:
    """Assign a task to a team member."""
    assignee = await _resolve_user(user_id)
    actor = await get_auth_service().current_user()

    task = await get_task_service().assign_task(project_id, task_id, assignee, actor)
    if assignee is None:
        format_success(f"Unassigned '{task.title}'")
    else:
        format_success(f"Assigned '{task.title}' to {assignee.name}")
