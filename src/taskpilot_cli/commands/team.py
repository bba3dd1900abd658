"""Team directory commands."""

import typer

from taskpilot_cli.services.user_service import get_user_service
from taskpilot_cli.utils.typer_helpers import SuggestingGroup
from taskpilot_cli.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Team directory commands")


@app.command("list")
@command_wrapper
async def list_team(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List team members."""
    users = await get_user_service().list_users()
    format_output([u.model_dump(mode="json", by_alias=True) for u in users], output)


@app.command("invite")
@command_wrapper
async def invite(
    email: str = typer.Argument(..., help="Email address"),
    name: str | None = typer.Option(None, "--name", help="Display name"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Add someone to the team directory."""
    user = await get_user_service().add_user(name, email)
    format_success(f"Invited {user.name} <{user.email}>")
    format_output(user.model_dump(mode="json", by_alias=True), output)
