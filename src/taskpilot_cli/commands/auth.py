"""Authentication commands."""

import typer
from rich.prompt import Prompt

from taskpilot_cli.services.auth_service import get_auth_service
from taskpilot_cli.utils.typer_helpers import SuggestingGroup
from taskpilot_cli.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Authentication commands")


def _ask_password(password: str | None, requires_login: bool) -> str:
    if password:
        return password
    if not requires_login:
        # Local vaults do not check passwords
        return ""
    return Prompt.ask("Password", password=True)


@app.command("login")
@command_wrapper(auth_required=False)
async def login(
    email: str | None = typer.Option(None, "--email", help="Email address"),
    password: str | None = typer.Option(None, "--password", help="Password"),
) -> None:
    """Login to the active context."""
    auth_service = get_auth_service()
    requires_login = auth_service.identity_provider.requires_login

    if not email:
        email = Prompt.ask("Email")
    password = _ask_password(password, requires_login)
    if not email or (requires_login and not password):
        format_error("Email and password are required")
        raise typer.Exit(2)

    user = await auth_service.sign_in(email, password)
    name = user.name if user else email
    format_success(f"Logged in as {name} <{email}>")


@app.command("signup")
@command_wrapper(auth_required=False)
async def signup(
    email: str | None = typer.Option(None, "--email", help="Email address"),
    password: str | None = typer.Option(None, "--password", help="Password"),
    name: str | None = typer.Option(None, "--name", help="Display name"),
) -> None:
    """Create a new account and sign it in."""
    auth_service = get_auth_service()
    requires_login = auth_service.identity_provider.requires_login

    if not email:
        email = Prompt.ask("Email")
    password = _ask_password(password, requires_login)
    if not email or (requires_login and not password):
        format_error("Email and password are required")
        raise typer.Exit(2)

    user = await auth_service.sign_up(name, email, password)
    format_success(f"Account created for {user.name if user else email}")


@app.command("logout")
@command_wrapper(auth_required=False)
async def logout() -> None:
    """Logout from the active context."""
    await get_auth_service().sign_out()
    format_success("Logged out")


@app.command("whoami")
@command_wrapper
async def whoami(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show the signed-in user."""
    user = await get_auth_service().current_user()
    format_output(user.model_dump(mode="json", by_alias=True), output)


@app.command("profile")
@command_wrapper
async def profile(
    name: str = typer.Option(..., "--name", help="New display name"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Update the signed-in user's display name."""
    user = await get_auth_service().update_profile(name)
    format_success(f"Profile updated: {user.name}")
    format_output(user.model_dump(mode="json", by_alias=True), output)
