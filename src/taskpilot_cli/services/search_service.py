"""Search across projects, tasks and team members."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel

from taskpilot_cli.models import Project, User


class SearchResult(BaseModel):
    """One match. ``project_id`` is set for projects and tasks."""

    kind: Literal["project", "task", "user"]
    id: str
    title: str
    project_id: str | None = None


def search(projects: Sequence[Project], users: Sequence[User], query: str) -> list[SearchResult]:
    """Case-insensitive substring search.

    Matches project names, task titles and user names, grouped in that
    order. A blank query matches nothing.
    """
    needle = query.strip().lower()
    if not needle:
        return []

    results = [
        SearchResult(kind="project", id=project.id, title=project.name, project_id=project.id)
        for project in projects
        if needle in project.name.lower()
    ]
    results.extend(
        SearchResult(kind="task", id=task.id, title=task.title, project_id=project.id)
        for project in projects
        for task in project.tasks
        if needle in task.title.lower()
    )
    results.extend(
        SearchResult(kind="user", id=user.id, title=user.name)
        for user in users
        if needle in user.name.lower()
    )
    return results
