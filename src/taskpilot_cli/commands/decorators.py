"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import typer
from pydantic import ValidationError

from taskpilot_cli.models import TaskPilotError
from taskpilot_cli.services.config_service import close_storage
from taskpilot_cli.utils.exit_codes import ERROR_AUTH_FAILURE, ERROR_INVALID_ARGS, exit_code_for
from taskpilot_cli.utils.logger import get_logger
from taskpilot_cli.utils.ui.formatters import format_error


def _require_auth() -> None:
    """Require a signed-in user. Local contexts never require login."""
    from taskpilot_cli.services.auth_service import get_auth_service

    if not get_auth_service().is_authenticated():
        format_error("Not logged in. Use 'taskpilot auth login' to authenticate.")
        raise typer.Exit(ERROR_AUTH_FAILURE)


async def _run_and_close(func: Callable, *args, **kwargs):
    try:
        return await func(*args, **kwargs)
    finally:
        await close_storage()


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


def command_wrapper(_func: Callable | None = None, *, auth_required: bool = True):
    """Decorator to wrap command functions with common functionality.

    Runs async commands to completion, logs start and finish, and turns
    application errors into a message plus a semantic exit code.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                if auth_required:
                    _require_auth()

                if inspect.iscoroutinefunction(func):
                    result = asyncio.run(_run_and_close(func, *args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                elapsed = time.monotonic() - start
                logger.info("command completed: %s (%.3fs)", cmd, elapsed)
                return result

            except TaskPilotError as e:
                elapsed = time.monotonic() - start
                logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, str(e))
                format_error(str(e))
                raise typer.Exit(code=exit_code_for(e)) from e

            except ValidationError as e:
                logger.error("command failed: %s - invalid input: %s", cmd, e)
                format_error(_validation_message(e))
                raise typer.Exit(code=ERROR_INVALID_ARGS) from e

            except ValueError as e:
                logger.error("command failed: %s - %s", cmd, e)
                format_error(str(e))
                raise typer.Exit(code=ERROR_INVALID_ARGS) from e

            except typer.Exit:
                # Re-raise Typer's own exits (like --help or explicit Exit(0))
                raise

            except Exception as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
                # Generic fallback for unexpected crashes
                format_error(f"An unexpected error occurred: {str(e)}")
                raise typer.Exit(code=1) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
