"""Argument parsing helpers shared by commands."""

from datetime import UTC, datetime

from taskpilot_cli.models import TaskPriority, TaskStatus

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


def _normalize(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch.isalnum())


def parse_status(text: str) -> TaskStatus:
    """Accept any spelling of a status ("in-progress", "In Progress", "todo")."""
    wanted = _normalize(text)
    for status in TaskStatus:
        if wanted in (_normalize(status.value), _normalize(status.name)):
            return status
    choices = ", ".join(status.value for status in TaskStatus)
    raise ValueError(f"Invalid status '{text}'. Choose from: {choices}")


def parse_priority(text: str) -> TaskPriority:
    wanted = _normalize(text)
    for priority in TaskPriority:
        if wanted == _normalize(priority.value):
            return priority
    choices = ", ".join(priority.value for priority in TaskPriority)
    raise ValueError(f"Invalid priority '{text}'. Choose from: {choices}")


def as_utc(value: datetime | None) -> datetime | None:
    """Dates typed on the command line are taken as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
