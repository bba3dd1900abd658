"""TaskPilot domain models.

This package contains the Pydantic models that represent the core domain
entities (projects with their embedded tasks, activities and files, plus
directory users) and the exceptions raised across the application.
"""

from .config_models import AppConfig, Context as ConfigContext
from .core import (
    Activity,
    AuthSession,
    FileRecord,
    Identity,
    Project,
    ProjectCreate,
    ProjectUpdate,
    Task,
    TaskCreate,
    TaskPriority,
    TaskStatus,
    User,
)
from .exceptions import (
    AIResponseError,
    AuthenticationError,
    BackendError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    TaskPilotError,
)

__all__ = [
    # Project models
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "FileRecord",
    "Activity",
    # Task models
    "Task",
    "TaskCreate",
    "TaskStatus",
    "TaskPriority",
    # User models
    "User",
    "Identity",
    "AuthSession",
    # Config models
    "AppConfig",
    "ConfigContext",
    # Errors
    "TaskPilotError",
    "NotFoundError",
    "DuplicateError",
    "BackendError",
    "ConflictError",
    "AuthenticationError",
    "AIResponseError",
]
