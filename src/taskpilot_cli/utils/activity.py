"""Activity log entries describing task changes."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from taskpilot_cli.models import Activity, Task, User


def new_activity(actor: User, text: str) -> Activity:
    """Build an activity entry stamped now with a fresh identifier."""
    return Activity(
        id=str(uuid.uuid4()),
        text=text,
        timestamp=datetime.now(UTC),
        user=actor,
    )


def describe_new_task(task: Task, actor: User) -> Activity:
    """Activity for a task that was just added to a project."""
    text = f'created a new task: "{task.title}"'
    if task.assignee is not None:
        text += f" and assigned it to {task.assignee.name}"
    return new_activity(actor, text)


def describe_change(original: Task, updated: Task, actor: User) -> Activity:
    """Describe how ``updated`` differs from ``original`` in one sentence.

    The first matching rule wins: a status move, then an assignment change,
    then a generic update. Both tasks are expected to share an id; finding
    the original is the caller's job.

    Args:
        original: Task as currently stored
        updated: Task as submitted
        actor: User performing the change

    Returns:
        A new, unsaved Activity
    """
    title = updated.title
    if original.status != updated.status:
        text = (
            f'moved task "{title}" from {original.status.value} '
            f"to {updated.status.value}"
        )
    elif _assignee_id(original) != _assignee_id(updated):
        if updated.assignee is not None:
            text = f'assigned task "{title}" to {updated.assignee.name}'
        else:
            text = f'unassigned task "{title}"'
    else:
        text = f'updated task "{title}"'
    return new_activity(actor, text)


def _assignee_id(task: Task) -> str | None:
    return task.assignee.id if task.assignee is not None else None
