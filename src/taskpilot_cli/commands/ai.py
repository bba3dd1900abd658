"""AI assistant commands."""

import typer

from taskpilot_cli.models import NotFoundError
from taskpilot_cli.services.ai_service import get_ai_service
from taskpilot_cli.services.project_service import get_project_service
from taskpilot_cli.utils.typer_helpers import SuggestingGroup
from taskpilot_cli.utils.ui.console import get_console
from taskpilot_cli.utils.ui.formatters import format_output

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="AI assistant commands")
console = get_console()


@app.command("outline")
@command_wrapper
async def outline(
    description: str = typer.Argument(..., help="What the project is about"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Draft a project outline in Markdown."""
    result = await get_ai_service().generate_project_outline(description)
    if output == "pretty":
        console.print(result.project_outline)
    else:
        format_output(result.model_dump(by_alias=True), output)


@app.command("suggest")
@command_wrapper
async def suggest(
    description: str = typer.Argument(..., help="What the project is about"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Suggest tasks for a project."""
    result = await get_ai_service().generate_tasks_for_project(description)
    format_output([task.model_dump(mode="json") for task in result.tasks], output)


@app.command("summarize")
@command_wrapper
async def summarize(
    project_id: str | None = typer.Argument(None, help="Project whose notes to summarize"),
    text: str | None = typer.Option(None, "--text", help="Notes to summarize instead"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Summarize progress notes."""
    if text is None:
        if project_id is None:
            raise ValueError("Give a project ID or --text")
        project = await get_project_service().get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project not found: {project_id}")
        text = project.progress_notes
    if not text.strip():
        raise ValueError("There are no progress notes to summarize")

    result = await get_ai_service().summarize_progress_notes(text)
    if output == "pretty":
        console.print(result.summary)
    else:
        format_output(result.model_dump(), output)
