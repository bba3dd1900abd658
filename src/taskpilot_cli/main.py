"""Main entry point for TaskPilot CLI."""

import typer

from taskpilot_cli.commands import ai, analytics, auth, contexts, projects, tasks, team
from taskpilot_cli.commands.search import search_command
from taskpilot_cli.commands.version_command import version
from taskpilot_cli.utils.typer_helpers import SuggestingGroup

# Create main app with custom group class
app = typer.Typer(
    name="taskpilot",
    cls=SuggestingGroup,
    help="Command-line project and task management for small teams",
    no_args_is_help=True,
)

# Add subcommands
app.add_typer(auth.app, name="auth", help="Authentication commands")
app.add_typer(projects.app, name="projects", help="Project management commands")
app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(team.app, name="team", help="Team directory commands")
app.add_typer(analytics.app, name="analytics", help="Dashboard and analytics")
app.add_typer(ai.app, name="ai", help="AI assistant commands")
app.add_typer(contexts.app, name="contexts", help="Context management")

# Add top-level commands
app.command("version")(version)
app.command("search")(search_command)


if __name__ == "__main__":
    app()
