"""Output formatters for different formats."""

import json
from datetime import UTC, datetime
from typing import Any

import yaml
from rich.table import Table
from rich.text import Text

from taskpilot_cli.utils.ui.console import get_console

console = get_console()


def format_output(data: Any, output_format: str = "pretty") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))
    elif output_format == "table":
        format_table(data)
    elif output_format == "quiet":
        format_quiet(data)
    else:
        format_pretty(data)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if value is None:
        return "-"
    if isinstance(value, dict):
        # Embedded users and activities
        return str(value.get("name") or value.get("text") or value.get("id") or "")
    if isinstance(value, list):
        return str(len(value)) if value and isinstance(value[0], dict) else ", ".join(str(v) for v in value)
    return str(value)


def _heading(key: str) -> str:
    spaced = "".join(f" {c}" if c.isupper() else c for c in key)
    return spaced.replace("_", " ").strip().title()


def format_table(data: Any) -> None:
    """Format data as a table."""
    if not data:
        console.print("[yellow]No data to display[/yellow]")
        return

    if isinstance(data, list):
        if isinstance(data[0], dict):
            format_dict_table(data)
        else:
            for item in data:
                console.print(item)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    if not items:
        console.print("[yellow]No items found[/yellow]")
        return

    columns = list(items[0].keys())
    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(_heading(col))
    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        table.add_row(_heading(key), _cell(value))

    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Pretty Format Implementation
# ============================================================================

PRIORITY_ICONS = {
    "High": "🔴",
    "Medium": "🟡",
    "Low": "🟢",
}

PRIORITY_COLORS = {
    "High": "bold red",
    "Medium": "bold yellow",
    "Low": "green",
}

# Board columns, in board order
STATUS_ICONS = {
    "Backlog": "🗂️",
    "To-do": "⬜",
    "In Progress": "🔄",
    "Done": "☑️",
}


def format_pretty(data: Any) -> None:
    """Format data in pretty format with colors and icons."""
    if not data:
        console.print("[yellow]No data to display[/yellow]")
        return

    if isinstance(data, list):
        first_item = data[0]
        if not isinstance(first_item, dict):
            for item in data:
                console.print(f"• {item}")
        elif "completionPercentage" in first_item:
            format_projects_pretty(data)
        elif "status" in first_item and "title" in first_item:
            format_tasks_pretty(data)
        elif "email" in first_item and "initials" in first_item:
            format_users_pretty(data)
        elif "text" in first_item and "timestamp" in first_item:
            format_activities_pretty(data)
        else:
            format_generic_list_pretty(data)
    elif isinstance(data, dict):
        if "completionPercentage" in data and "tasks" in data:
            format_project_detail_pretty(data)
        else:
            format_single_item_pretty(data)
    else:
        console.print(data)


def format_projects_pretty(projects: list[dict]) -> None:
    """Format projects in pretty format."""
    header = Text()
    header.append("📁 Projects ", style="bold cyan")
    header.append(f"({len(projects)})", style="dim")
    console.print(header)
    console.print()

    for project in projects:
        format_project_item(project, indent="  ")
    console.print()


def format_project_item(project: dict, indent: str = "") -> None:
    """Format a single project line with its progress."""
    percentage = project.get("completionPercentage", 0)
    color = get_completion_color(percentage)
    line = Text(indent)
    line.append(project.get("name", "Untitled"), style="bold")
    line.append(f"  {get_progress_bar(percentage)} ", style=color)
    line.append(f"{percentage}%", style=color)
    console.print(line)

    meta = []
    if project.get("deadline"):
        meta.append((f"📅 {format_due_date(project['deadline'])}", "cyan"))
    tasks = project.get("tasks") or []
    meta.append((f"{len(tasks)} tasks", "dim"))
    owner = project.get("owner") or {}
    if owner.get("name"):
        meta.append((f"👤 {owner['name']}", "yellow"))
    if project.get("id"):
        meta.append((f"#{project['id']}", "dim"))

    meta_line = Text(indent + "  ")
    for i, (text, style) in enumerate(meta):
        if i:
            meta_line.append(" • ", style="dim")
        meta_line.append(text, style=style)
    console.print(meta_line)


def format_project_detail_pretty(project: dict) -> None:
    """Project header, notes, board and latest activity."""
    format_project_item(project)
    if project.get("progressNotes"):
        console.print()
        console.print(f"  [dim]{project['progressNotes']}[/dim]")
    console.print()
    if project.get("tasks"):
        format_tasks_pretty(project["tasks"])
    if project.get("files"):
        console.print("📎 FILES", style="bold blue")
        for file in project["files"]:
            console.print(f"  {file.get('name')} [dim]({file.get('size')})[/dim] {file.get('url')}")
        console.print()
    activities = project.get("activities") or []
    if activities:
        format_activities_pretty(list(reversed(activities))[:5])


def format_tasks_pretty(tasks: list[dict]) -> None:
    """Format tasks grouped by board column."""
    done = sum(1 for t in tasks if t.get("status") == "Done")
    header = Text()
    header.append("📋 Tasks ", style="bold cyan")
    header.append(f"({len(tasks)} total, {done} done)", style="dim")
    console.print(header)
    console.print()

    for status, icon in STATUS_ICONS.items():
        column = [t for t in tasks if t.get("status") == status]
        if not column:
            continue
        console.print(f"{icon} {status.upper()} ({len(column)})", style="bold blue")
        for task in column:
            format_task_item(task, indent="  ")
        console.print()


def format_task_item(task: dict, indent: str = "") -> None:
    """Format a single task line with its metadata."""
    priority = task.get("priority", "Medium")
    line = Text(indent)
    line.append(f"{PRIORITY_ICONS.get(priority, '•')} ")
    style = "dim" if task.get("status") == "Done" else PRIORITY_COLORS.get(priority, "")
    line.append(task.get("title", "Untitled"), style=style)
    console.print(line)

    meta = []
    if task.get("dueDate"):
        overdue = is_overdue(task["dueDate"]) and task.get("status") != "Done"
        meta.append((f"📅 {format_due_date(task['dueDate'])}", "bold red" if overdue else "cyan"))
    assignee = task.get("assignee") or {}
    if assignee.get("name"):
        meta.append((f"👤 {assignee['name']}", "yellow"))
    if task.get("id"):
        meta.append((f"#{task['id']}", "dim"))
    if meta:
        meta_line = Text(indent + "   ")
        for i, (text, meta_style) in enumerate(meta):
            if i:
                meta_line.append(" • ", style="dim")
            meta_line.append(text, style=meta_style)
        console.print(meta_line)


def format_users_pretty(users: list[dict]) -> None:
    """Format the team directory."""
    header = Text()
    header.append("👥 Team ", style="bold cyan")
    header.append(f"({len(users)} members)", style="dim")
    console.print(header)
    console.print()
    for user in users:
        line = Text("  ")
        line.append(f"[{user.get('initials') or '?'}] ", style="bold magenta")
        line.append(user.get("name", ""), style="bold")
        line.append(f"  {user.get('email', '')}", style="dim")
        console.print(line)


def format_activities_pretty(activities: list[dict]) -> None:
    """Format activity entries, as given (callers sort them)."""
    console.print("🕑 RECENT ACTIVITY", style="bold blue")
    for activity in activities:
        user = activity.get("user") or {}
        line = Text("  ")
        line.append(user.get("name", "Someone"), style="bold")
        line.append(f" {activity.get('text', '')}")
        when = format_relative_time(activity.get("timestamp"))
        if when:
            line.append(f"  {when}", style="dim")
        if activity.get("project_name"):
            line.append(f"  [{activity['project_name']}]", style="blue")
        console.print(line)
    console.print()


def format_generic_list_pretty(items: list[dict]) -> None:
    """Format a generic list of items."""
    for item in items:
        label = item.get("name") or item.get("title") or item.get("id", "Item")
        console.print(f"• {label}", style="bold")


def format_single_item_pretty(item: dict) -> None:
    """Format a single item in pretty format."""
    for key, value in item.items():
        console.print(f"[cyan]{_heading(key)}:[/cyan] {_cell(value)}")


def format_quiet(data: Any) -> None:
    """Format output in quiet mode (IDs only)."""
    if isinstance(data, list):
        for item in data:
            if isinstance(item, dict) and "id" in item:
                print(item["id"])
    elif isinstance(data, dict) and "id" in data:
        print(data["id"])


# ============================================================================
# Helper Functions
# ============================================================================


def _parse(value: str | datetime) -> datetime | None:
    if isinstance(value, datetime):
        date = value
    else:
        try:
            date = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if date.tzinfo is None:
        date = date.replace(tzinfo=UTC)
    return date


def is_overdue(due_date: str | datetime | None) -> bool:
    """Check whether a due date lies in the past."""
    if not due_date:
        return False
    date = _parse(due_date)
    return date is not None and date < datetime.now(UTC)


def format_due_date(date_str: str | datetime) -> str:
    """Format a date as ``DD/MM DayOfWeek`` (year added when not this year)."""
    date = _parse(date_str)
    if date is None:
        return str(date_str) if date_str else ""

    day_str = date.strftime("%d/%m")
    if date.year != datetime.now(UTC).year:
        day_str = date.strftime("%d/%m/%Y")
    return f"{day_str} {date.strftime('%a')}"


def format_relative_time(date_str: str | datetime | None) -> str:
    """Format timestamp as relative time."""
    if not date_str:
        return ""
    date = _parse(date_str)
    if date is None:
        return ""

    seconds = (datetime.now(UTC) - date).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds / 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds / 3600)}h ago"
    return f"{int(seconds / 86400)}d ago"


def get_progress_bar(percentage: float) -> str:
    """Get a progress bar representation."""
    filled = int(percentage / 10)
    empty = 10 - filled
    return "▓" * filled + "░" * empty


def get_completion_color(percentage: float) -> str:
    """Get color based on completion percentage."""
    if percentage >= 80:
        return "green"
    if percentage >= 40:
        return "yellow"
    return "red"
