"""
Exit codes for TaskPilot CLI.

Semantic exit codes let scripts tell what went wrong without parsing output.
"""

from taskpilot_cli.models import (
    AIResponseError,
    AuthenticationError,
    BackendError,
    ConflictError,
    DuplicateError,
    NotFoundError,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Authentication failure (not logged in, invalid credentials, etc.)
ERROR_AUTH_FAILURE = 3

# Network or backend error (unreachable, timeout, rejected request)
ERROR_NETWORK = 4

# Resource not found
ERROR_NOT_FOUND = 5

# Concurrent modification; re-run the command
ERROR_CONFLICT = 7


def exit_code_for(error: Exception) -> int:
    """Exit code for an exception raised by a command."""
    if isinstance(error, NotFoundError):
        return ERROR_NOT_FOUND
    if isinstance(error, AuthenticationError):
        return ERROR_AUTH_FAILURE
    if isinstance(error, ConflictError):
        return ERROR_CONFLICT
    if isinstance(error, (DuplicateError, ValueError)):
        return ERROR_INVALID_ARGS
    if isinstance(error, (BackendError, AIResponseError)):
        return ERROR_NETWORK
    return ERROR_GENERAL
