"""Services module for TaskPilot CLI - Business logic layer."""

from .ai_service import AIService, LanguageModelClient
from .auth_service import AuthService
from .config_service import ConfigService
from .file_service import FileService
from .project_service import ProjectService
from .task_service import TaskService
from .user_service import UserService

__all__ = [
    "AIService",
    "AuthService",
    "ConfigService",
    "FileService",
    "LanguageModelClient",
    "ProjectService",
    "TaskService",
    "UserService",
]
