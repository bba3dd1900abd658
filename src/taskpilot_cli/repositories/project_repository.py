"""Typed access to the ``projects`` collection.

This is the serialization boundary for projects: ``decode_project`` is the
only place a stored document becomes a Project, and ``encode_project`` the
only place a Project becomes stored fields.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from taskpilot_cli.models import BackendError, Project
from taskpilot_cli.utils.logger import get_logger
from taskpilot_cli.utils.progress import completion_percentage

from .repository import PROJECTS_COLLECTION, Document, DocumentStore

logger = get_logger(__name__)


def decode_project(document: Document) -> Project:
    """Build a Project from a stored document.

    The stored completion percentage is ignored and recomputed from the
    task list.

    Raises:
        BackendError: If the document does not hold a valid project
    """
    data = dict(document.data)
    data["id"] = document.id
    try:
        project = Project.model_validate(data)
    except ValidationError as e:
        raise BackendError(f"Malformed project document {document.id}: {e}") from e
    project.completion_percentage = completion_percentage(project.tasks)
    project.revision = document.revision
    return project


def encode_project(project: Project) -> dict[str, Any]:
    """Stored fields of a project. The id lives in the document key."""
    data = project.to_document()
    data.pop("id", None)
    return data


class ProjectRepository:
    """Reads and writes Project aggregates through a DocumentStore."""

    def __init__(self, store: DocumentStore):
        """Initialize the repository.

        Args:
            store: DocumentStore implementation holding the projects collection
        """
        self.store = store

    async def list_all(self) -> list[Project]:
        """List all projects. Documents that fail to decode are skipped."""
        projects = []
        for document in await self.store.list_all(PROJECTS_COLLECTION):
            try:
                projects.append(decode_project(document))
            except BackendError as e:
                logger.warning("skipping project: %s", e)
        return projects

    async def get(self, project_id: str) -> Project | None:
        """Get a project by ID, or None if it does not exist."""
        document = await self.store.get(PROJECTS_COLLECTION, project_id)
        if document is None:
            return None
        return decode_project(document)

    async def create(self, project: Project) -> str:
        """Store a new project and return its generated ID.

        ``project.id`` is ignored; the store assigns the identifier.
        """
        return await self.store.add(PROJECTS_COLLECTION, encode_project(project))

    async def update_fields(
        self,
        project_id: str,
        fields: dict[str, Any],
        *,
        revision: str | None = None,
    ) -> None:
        """Replace top-level stored fields of a project.

        Args:
            project_id: Project to update
            fields: Stored (camelCase) field names mapped to JSON values
            revision: Optional revision the stored project must still have
        """
        await self.store.update(
            PROJECTS_COLLECTION, project_id, fields, revision=revision
        )

    async def delete(self, project_id: str) -> None:
        """Delete a project document."""
        await self.store.delete(PROJECTS_COLLECTION, project_id)
