"""Repository interfaces and typed repositories for TaskPilot.

This package contains abstract base classes (ABCs) that define the contracts
for the external services (the "Ports" in the Hexagonal Architecture), and
the typed repositories that decode stored documents into domain models.

Implementations (Adapters) are in:
- taskpilot_cli.adapters.sqlite (local vault)
- taskpilot_cli.adapters.firebase (hosted backend)
"""

from .project_repository import ProjectRepository, decode_project, encode_project
from .repository import (
    PROJECTS_COLLECTION,
    USERS_COLLECTION,
    Document,
    DocumentStore,
    FileStorage,
    IdentityProvider,
)
from .user_repository import UserRepository, decode_user

__all__ = [
    "Document",
    "DocumentStore",
    "FileStorage",
    "IdentityProvider",
    "PROJECTS_COLLECTION",
    "USERS_COLLECTION",
    "ProjectRepository",
    "UserRepository",
    "decode_project",
    "encode_project",
    "decode_user",
]
