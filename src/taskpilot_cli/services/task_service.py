"""Task service - Business logic for tasks embedded in projects.

Every mutation reads the project, changes its task list in memory, and
writes tasks, completion percentage and activity log back in one update
conditioned on the revision that was read. A concurrent writer makes the
update fail with ConflictError rather than silently losing its change.
"""

from __future__ import annotations

import uuid
from typing import Any

from taskpilot_cli.models import (
    BackendError,
    ConflictError,
    NotFoundError,
    Project,
    Task,
    TaskCreate,
    TaskPilotError,
    TaskStatus,
    User,
)
from taskpilot_cli.repositories import ProjectRepository
from taskpilot_cli.utils.activity import describe_change, describe_new_task
from taskpilot_cli.utils.logger import get_logger
from taskpilot_cli.utils.progress import completion_percentage
from taskpilot_cli.utils.view_cache import (
    DASHBOARD_VIEW,
    PROJECTS_VIEW,
    ViewCache,
    project_view,
)

logger = get_logger(__name__)

CREATE_FAILED = "Failed to create task"
UPDATE_FAILED = "Failed to update task"


def _task_fields(project: Project) -> dict[str, Any]:
    return {
        "tasks": [task.to_document() for task in project.tasks],
        "completionPercentage": project.completion_percentage,
        "activities": [activity.to_document() for activity in project.activities],
    }


class TaskService:
    """Service for task business logic."""

    def __init__(self, project_repository: ProjectRepository, cache: ViewCache):
        self.repository = project_repository
        self.cache = cache

    async def _load_project(self, project_id: str, failure: str) -> Project:
        try:
            project = await self.repository.get(project_id)
        except TaskPilotError as e:
            logger.error("failed to read project %s: %s", project_id, e)
            raise BackendError(failure) from e
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def _save(self, project: Project, failure: str) -> None:
        try:
            await self.repository.update_fields(
                project.id, _task_fields(project), revision=project.revision
            )
        except ConflictError:
            logger.warning("project %s changed concurrently", project.id)
            raise
        except NotFoundError as e:
            raise NotFoundError("Project not found") from e
        except TaskPilotError as e:
            logger.error("failed to write project %s: %s", project.id, e)
            raise BackendError(failure) from e

        self.cache.invalidate(project_view(project.id), DASHBOARD_VIEW, PROJECTS_VIEW)

    async def add_task(self, project_id: str, task_data: TaskCreate, actor: User) -> Task:
        """Add a task to a project and log the creation.

        Args:
            project_id: Project to add the task to
            task_data: Fields of the new task
            actor: User performing the change

        Returns:
            The created Task

        Raises:
            NotFoundError: If the project does not exist (nothing is written)
            ConflictError: If the project changed since it was read
            BackendError: If the backend fails
        """
        project = await self._load_project(project_id, CREATE_FAILED)

        task = Task(id=str(uuid.uuid4()), **task_data.model_dump())
        project.tasks.append(task)
        project.completion_percentage = completion_percentage(project.tasks)
        project.activities.append(describe_new_task(task, actor))

        await self._save(project, CREATE_FAILED)
        logger.info("added task %s to project %s", task.id, project_id)
        return task

    async def update_task(self, project_id: str, updated_task: Task, actor: User) -> Task:
        """Replace a task in place and log what changed.

        Raises:
            NotFoundError: If the project or the task does not exist
            ConflictError: If the project changed since it was read
            BackendError: If the backend fails
        """
        project = await self._load_project(project_id, UPDATE_FAILED)
        return await self._replace_task(project, updated_task, actor)

    async def _replace_task(self, project: Project, updated_task: Task, actor: User) -> Task:
        for index, task in enumerate(project.tasks):
            if task.id == updated_task.id:
                original = task
                break
        else:
            raise NotFoundError("Task not found")

        activity = describe_change(original, updated_task, actor)
        project.tasks[index] = updated_task
        project.completion_percentage = completion_percentage(project.tasks)
        project.activities.append(activity)

        await self._save(project, UPDATE_FAILED)
        logger.info("updated task %s in project %s", updated_task.id, project.id)
        return updated_task

    async def edit_task(
        self, project_id: str, task_id: str, changes: dict[str, Any], actor: User
    ) -> Task:
        """Apply field changes to the stored task and log what changed.

        Fields not named in ``changes`` keep their stored values.

        Args:
            project_id: Project holding the task
            task_id: Task to change
            changes: Task field names mapped to new values
            actor: User performing the change

        Raises:
            NotFoundError: If the project or the task does not exist
            ConflictError: If the project changed since it was read
            BackendError: If the backend fails
        """
        project = await self._load_project(project_id, UPDATE_FAILED)
        task = project.find_task(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return await self._replace_task(project, task.model_copy(update=changes), actor)

    async def move_task(
        self, project_id: str, task_id: str, status: TaskStatus, actor: User
    ) -> Task:
        """Move a task to another status column."""
        return await self.edit_task(project_id, task_id, {"status": status}, actor)

    async def assign_task(
        self, project_id: str, task_id: str, assignee: User | None, actor: User
    ) -> Task:
        """Assign a task to a user, or unassign it with ``None``."""
        return await self.edit_task(project_id, task_id, {"assignee": assignee}, actor)


def get_task_service() -> TaskService:
    """Factory function to create a TaskService instance."""
    from taskpilot_cli.services.config_service import (
        get_storage_strategy_context,
        get_view_cache,
    )

    return TaskService(get_storage_strategy_context().project_repository, get_view_cache())
