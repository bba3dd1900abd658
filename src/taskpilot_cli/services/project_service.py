"""Project service - Business logic for project operations."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from pydantic import ValidationError

from taskpilot_cli.models import (
    BackendError,
    ConflictError,
    FileRecord,
    NotFoundError,
    Project,
    ProjectCreate,
    ProjectUpdate,
    Task,
    TaskPilotError,
    User,
)
from taskpilot_cli.repositories import ProjectRepository
from taskpilot_cli.services import analytics_service
from taskpilot_cli.services.analytics_service import Dashboard
from taskpilot_cli.utils.logger import get_logger
from taskpilot_cli.utils.progress import completion_percentage
from taskpilot_cli.utils.view_cache import (
    DASHBOARD_VIEW,
    PROJECTS_VIEW,
    ViewCache,
    project_view,
)

logger = get_logger(__name__)


def _cacheable(project: Project) -> dict:
    return project.model_dump(mode="json", by_alias=True)


class ProjectService:
    """Service for project business logic.

    Reads degrade to empty results when the backend fails; mutations raise
    and invalidate the cached views they affect.
    """

    def __init__(self, project_repository: ProjectRepository, cache: ViewCache):
        """Initialize the project service.

        Args:
            project_repository: Typed access to stored projects
            cache: View cache invalidated after mutations
        """
        self.repository = project_repository
        self.cache = cache

    async def list_projects(self) -> list[Project]:
        """List all projects with their completion percentages.

        Returns:
            List of Project objects, empty if the backend is unavailable
        """
        cached = self.cache.get(PROJECTS_VIEW)
        if cached is not None:
            try:
                return [Project.model_validate(item) for item in cached]
            except ValidationError:
                logger.warning("discarding stale %s view", PROJECTS_VIEW)

        try:
            projects = await self.repository.list_all()
        except TaskPilotError:
            logger.error("failed to list projects", exc_info=True)
            return []
        self.cache.put(PROJECTS_VIEW, [_cacheable(p) for p in projects])
        return projects

    async def get_project(self, project_id: str) -> Project | None:
        """Get a specific project by ID.

        Returns:
            The Project, or None if it does not exist or cannot be read
        """
        view = project_view(project_id)
        cached = self.cache.get(view)
        if cached is not None:
            try:
                return Project.model_validate(cached)
            except ValidationError:
                logger.warning("discarding stale %s view", view)

        try:
            project = await self.repository.get(project_id)
        except TaskPilotError:
            logger.error("failed to read project %s", project_id, exc_info=True)
            return None
        if project is not None:
            self.cache.put(view, _cacheable(project))
        return project

    async def get_dashboard(self) -> Dashboard:
        """Totals and per-status counts across all projects.

        An empty workspace is not cached, since it may stand for a failed
        read.
        """
        cached = self.cache.get(DASHBOARD_VIEW)
        if cached is not None:
            try:
                return Dashboard.model_validate(cached)
            except ValidationError:
                logger.warning("discarding stale %s view", DASHBOARD_VIEW)

        projects = await self.list_projects()
        result = analytics_service.dashboard(projects)
        if projects:
            self.cache.put(DASHBOARD_VIEW, result.model_dump(mode="json"))
        return result

    async def require_project(self, project_id: str) -> Project:
        """Read a project from the backend, bypassing the cached view.

        Raises:
            NotFoundError: If the project does not exist
            BackendError: If the project cannot be read
        """
        try:
            project = await self.repository.get(project_id)
        except TaskPilotError as e:
            raise BackendError("Failed to read project") from e
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def create_project(
        self,
        name: str,
        description: str,
        deadline: datetime,
        initial_tasks: Sequence[Task] = (),
        *,
        owner: User,
    ) -> str:
        """Create a new project.

        Args:
            name: Project name (required)
            description: Initial progress notes
            deadline: Project deadline
            initial_tasks: Tasks the project starts with
            owner: Creating user

        Returns:
            The new project's ID
        """
        data = ProjectCreate(name=name, description=description, deadline=deadline)
        tasks = list(initial_tasks)
        project = Project(
            id="",
            name=data.name,
            owner=owner,
            deadline=data.deadline,
            progress_notes=data.description,
            completion_percentage=completion_percentage(tasks),
            tasks=tasks,
        )
        try:
            project_id = await self.repository.create(project)
        except TaskPilotError as e:
            logger.error("failed to create project %r: %s", name, e)
            raise BackendError("Failed to create project") from e

        logger.info("created project %s with %d tasks", project_id, len(tasks))
        self.cache.invalidate(PROJECTS_VIEW, DASHBOARD_VIEW)
        return project_id

    async def update_project(
        self,
        project_id: str,
        name: str,
        description: str,
        deadline: datetime,
    ) -> None:
        """Update project metadata. Tasks, activities and files are untouched.

        Raises:
            NotFoundError: If the project does not exist
            BackendError: If the backend rejects the write
        """
        data = ProjectUpdate(name=name, description=description, deadline=deadline)
        fields = {
            "name": data.name,
            "progressNotes": data.description,
            "deadline": data.deadline,
        }
        try:
            await self.repository.update_fields(project_id, fields)
        except NotFoundError as e:
            raise NotFoundError("Project not found") from e
        except TaskPilotError as e:
            logger.error("failed to update project %s: %s", project_id, e)
            raise BackendError("Failed to update project") from e

        self.cache.invalidate(project_view(project_id), PROJECTS_VIEW, DASHBOARD_VIEW)

    async def delete_project(self, project_id: str) -> None:
        """Delete a project. Uploaded files are left in storage."""
        try:
            await self.repository.delete(project_id)
        except TaskPilotError as e:
            logger.error("failed to delete project %s: %s", project_id, e)
            raise BackendError("Failed to delete project") from e

        logger.info("deleted project %s", project_id)
        self.cache.invalidate(project_view(project_id), PROJECTS_VIEW, DASHBOARD_VIEW)

    async def add_file_record(self, project_id: str, file: FileRecord) -> None:
        """Append a file record to a project.

        Raises:
            NotFoundError: If the project does not exist
            ConflictError: If the project changed while the file was added
            BackendError: If the backend rejects the write
        """
        try:
            project = await self.repository.get(project_id)
        except TaskPilotError as e:
            raise BackendError("Failed to add file") from e
        if project is None:
            raise NotFoundError("Project not found")

        files = [*project.files, file]
        try:
            await self.repository.update_fields(
                project_id,
                {"files": [f.to_document() for f in files]},
                revision=project.revision,
            )
        except ConflictError:
            raise
        except TaskPilotError as e:
            logger.error("failed to add file to project %s: %s", project_id, e)
            raise BackendError("Failed to add file") from e

        self.cache.invalidate(project_view(project_id), PROJECTS_VIEW)


def get_project_service() -> ProjectService:
    """Factory function to create a ProjectService instance."""
    from taskpilot_cli.services.config_service import (
        get_storage_strategy_context,
        get_view_cache,
    )

    return ProjectService(get_storage_strategy_context().project_repository, get_view_cache())
