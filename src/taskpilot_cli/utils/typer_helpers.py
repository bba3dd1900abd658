"""Typer helper utilities."""

from difflib import get_close_matches

import click
import typer
from typer.core import TyperGroup

from taskpilot_cli.utils.exit_codes import ERROR_INVALID_ARGS
from taskpilot_cli.utils.ui.console import get_console


def suggest_commands(attempted: str, names: list[str], limit: int = 3) -> list[str]:
    """Command names close to a mistyped one.

    A name the attempt is a prefix of ("proj" -> "projects", "task" ->
    "tasks") ranks first, followed by fuzzy matches.
    """
    wanted = attempted.lower()
    prefixed = sorted(name for name in names if name.startswith(wanted))
    fuzzy = get_close_matches(wanted, names, n=limit, cutoff=0.6)
    suggestions = prefixed + [name for name in fuzzy if name not in prefixed]
    return suggestions[:limit]


class SuggestingGroup(TyperGroup):
    """Typer group that answers an unknown command with "Did you mean ...".

    Only unknown-command errors are intercepted; other usage errors reach
    click untouched.
    """

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if not args:
                raise
            attempted = args[0]
            suggestions = suggest_commands(attempted, list(self.commands))
            if not suggestions:
                raise

            console = get_console()
            console.print(
                f'[red]Error:[/red] unknown command "{attempted}" for "{ctx.info_name}"'
            )
            console.print()
            heading = "Did you mean this?" if len(suggestions) == 1 else "Did you mean one of these?"
            console.print(f"[yellow]{heading}[/yellow]")
            for suggestion in suggestions:
                console.print(f"        {suggestion}")
            raise typer.Exit(ERROR_INVALID_ARGS) from e
