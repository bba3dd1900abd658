"""Custom exceptions for TaskPilot."""


class TaskPilotError(Exception):
    """Base exception for all TaskPilot errors."""


class NotFoundError(TaskPilotError):
    """Raised when a project, task or document does not exist."""


class DuplicateError(TaskPilotError):
    """Raised when a record collides with an existing one (e.g. user email)."""


class BackendError(TaskPilotError):
    """Raised when the document store, storage or identity backend fails."""


class ConflictError(TaskPilotError):
    """Raised when a conditional write loses against a concurrent writer."""


class AuthenticationError(TaskPilotError):
    """Raised when sign-in fails or no signed-in identity is available."""


class AIResponseError(TaskPilotError):
    """Raised when the language model returns output that fails validation."""
