"""Context management commands.

A context names a storage backend: a local vault file or a hosted project.
"""

import typer
from rich.table import Table

from taskpilot_cli.models import ConfigContext
from taskpilot_cli.services.config_service import get_config_service
from taskpilot_cli.utils.typer_helpers import SuggestingGroup
from taskpilot_cli.utils.ui.console import get_console
from taskpilot_cli.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Context management (local vaults, hosted projects)")
console = get_console()


@app.command("list")
@command_wrapper(auth_required=False)
def list_contexts(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List configured contexts."""
    config_service = get_config_service()
    contexts = config_service.list_contexts()
    current = config_service.config.current_context_name

    if output != "pretty":
        format_output([ctx.model_dump() for ctx in contexts], output)
        return

    table = Table(title="Contexts", show_header=True)
    table.add_column("", width=1)
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Source", style="dim")
    table.add_column("User")
    for ctx in contexts:
        table.add_row(
            "*" if ctx.name == current else "",
            ctx.name,
            ctx.type,
            ctx.source,
            ctx.user or "-",
        )
    console.print(table)


@app.command("use")
@command_wrapper(auth_required=False)
def use_context(
    name: str = typer.Argument(..., help="Context name"),
) -> None:
    """Switch to a different context."""
    config_service = get_config_service()

    current = config_service.get_current_context()
    if current.name == name:
        console.print(
            f"[yellow]ℹ[/yellow] Already using context '[cyan]{name}[/cyan]' ([dim]{current.type}[/dim])"
        )
        return

    ctx = config_service.use_context(name)
    format_success(f"Switched to context: {ctx.name}")
    if ctx.type == "remote" and config_service.load_session(ctx.name) is None:
        console.print("  [dim]Run 'taskpilot auth login' to sign in[/dim]")


@app.command("add")
@command_wrapper(auth_required=False)
def add_context(
    name: str = typer.Argument(..., help="Context name"),
    source: str = typer.Argument(..., help="Vault path (local) or Firebase project id (remote)"),
    type_: str = typer.Option("local", "--type", "-t", help="local or remote"),
    description: str = typer.Option("", "--description", help="Description"),
    use: bool = typer.Option(False, "--use", help="Switch to the new context"),
) -> None:
    """Add a context."""
    if type_ not in ("local", "remote"):
        raise ValueError(f"Invalid context type '{type_}'. Choose from: local, remote")

    config_service = get_config_service()
    ctx = ConfigContext(name=name, type=type_, source=source, description=description)
    config_service.add_context(ctx)
    format_success(f"Context added: {ctx.name} ({ctx.type})")
    if use:
        config_service.use_context(ctx.name)
        format_success(f"Switched to context: {ctx.name}")
