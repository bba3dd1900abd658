"""Project, task, user and activity data models.

Field names follow Python conventions; every field that the hosted web
front end stores in camelCase carries a pydantic alias, so documents written
by either side validate with ``Model.model_validate(data)`` and are written
back with ``model.to_document()``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(str, Enum):
    """Kanban column a task sits in. Transitions are unrestricted."""

    BACKLOG = "Backlog"
    TODO = "To-do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class TaskPriority(str, Enum):
    """Task priority level."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class DocumentModel(BaseModel):
    """Base for models stored in the document store."""

    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> dict:
        """Dump the model with stored (camelCase) field names.

        Timestamps stay ``datetime`` so each store writes its native type.
        """
        return self.model_dump(by_alias=True)


class User(DocumentModel):
    """Team member record. Embedded elsewhere as a denormalized snapshot.

    Attributes:
        id: Directory identifier (the identity provider uid for signed-in users)
        name: Display name
        email: Email address, unique across the directory
        avatar_url: Avatar image URL
        initials: Up to two letters derived from the name
    """

    id: str
    name: str
    email: str
    avatar_url: str = Field(default="", alias="avatarUrl")
    initials: str = ""


class Task(DocumentModel):
    """Unit of work owned by exactly one project.

    Attributes:
        id: Unique identifier (uuid4)
        title: Short task title
        status: Kanban status
        priority: Priority level
        due_date: Optional due date
        assignee: Snapshot of the assigned user, if any
    """

    id: str
    title: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = Field(default=None, alias="dueDate")
    assignee: User | None = None


class Activity(DocumentModel):
    """Append-only, human-readable log entry of a project change."""

    id: str
    text: str
    timestamp: datetime
    user: User


class FileRecord(DocumentModel):
    """Metadata of a file uploaded to a project.

    Attributes:
        name: Original file name
        type: MIME type
        size: Human-readable size (e.g. "1.5 KB")
        url: Retrievable download URL
    """

    name: str
    type: str = ""
    size: str = ""
    url: str


class Project(DocumentModel):
    """Project aggregate: tasks, activities and files are embedded.

    ``completion_percentage`` is derived from ``tasks`` and recomputed
    whenever a project is decoded or its task list is written.
    ``revision`` is the store's version token for the document as read; it
    is never written back as a field.
    """

    id: str
    name: str
    owner: User
    deadline: datetime
    progress_notes: str = Field(default="", alias="progressNotes")
    completion_percentage: int = Field(
        default=0, ge=0, le=100, alias="completionPercentage"
    )
    tasks: list[Task] = Field(default_factory=list)
    activities: list[Activity] = Field(default_factory=list)
    files: list[FileRecord] = Field(default_factory=list)
    revision: str | None = Field(default=None, exclude=True)

    def find_task(self, task_id: str) -> Task | None:
        """Return the task with the given id, or None."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


class TaskCreate(BaseModel):
    """Fields supplied when adding a task to a project."""

    title: str = Field(min_length=1)
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: datetime | None = None
    assignee: User | None = None


class ProjectCreate(BaseModel):
    """Fields supplied when creating a project.

    Attributes:
        name: Project name (required)
        description: Initial progress notes
        deadline: Project deadline
    """

    name: str = Field(min_length=1)
    description: str = ""
    deadline: datetime


class ProjectUpdate(BaseModel):
    """Metadata fields of a project. Tasks, activities and files are untouched."""

    name: str = Field(min_length=1)
    description: str = ""
    deadline: datetime


class Identity(BaseModel):
    """Identity record reported by the identity provider after sign-in."""

    external_id: str
    display_name: str | None = None
    email: str | None = None
    photo_url: str | None = None


class AuthSession(BaseModel):
    """Signed-in identity plus the tokens needed to act on its behalf."""

    identity: Identity
    id_token: str | None = None
    refresh_token: str | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime, leeway: int = 60) -> bool:
        """Whether the id token expires within ``leeway`` seconds of ``now``."""
        if self.expires_at is None:
            return False
        return (self.expires_at - now).total_seconds() <= leeway
