"""Analytics - Aggregate views over a list of projects.

All functions are pure; callers fetch the projects (usually through
``ProjectService.list_projects``) and render the results.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import BaseModel

from taskpilot_cli.models import Activity, Project, Task, TaskStatus
from taskpilot_cli.utils.progress import completion_percentage, count_by_status

# Display order of the status breakdown
BREAKDOWN_ORDER = (
    TaskStatus.DONE,
    TaskStatus.IN_PROGRESS,
    TaskStatus.TODO,
    TaskStatus.BACKLOG,
)


class StatusCount(BaseModel):
    status: TaskStatus
    count: int


class ProjectDistribution(BaseModel):
    """Task counts of one project (backlog tasks are not charted)."""

    project_id: str
    name: str
    todo: int
    in_progress: int
    done: int


class ActivityEntry(BaseModel):
    project_id: str
    project_name: str
    activity: Activity


class DashboardSummary(BaseModel):
    project_count: int
    task_count: int
    done_count: int
    completion_percentage: int


class Dashboard(BaseModel):
    """Everything the dashboard shows, as cached under its view path."""

    summary: DashboardSummary
    status_breakdown: list[StatusCount]


class ProjectReport(BaseModel):
    project_id: str
    name: str
    deadline: datetime
    completion_percentage: int
    status_counts: list[StatusCount]
    tasks: list[Task]


def _all_tasks(projects: Sequence[Project]) -> list[Task]:
    return [task for project in projects for task in project.tasks]


def _breakdown(tasks: Sequence[Task]) -> list[StatusCount]:
    counts = count_by_status(tasks)
    return [
        StatusCount(status=status, count=counts[status])
        for status in BREAKDOWN_ORDER
        if counts[status] > 0
    ]


def status_breakdown(projects: Sequence[Project]) -> list[StatusCount]:
    """Tasks per status across all projects, omitting empty statuses."""
    return _breakdown(_all_tasks(projects))


def task_distribution(projects: Sequence[Project]) -> list[ProjectDistribution]:
    """To-do, In Progress and Done counts for each project."""
    distribution = []
    for project in projects:
        counts = count_by_status(project.tasks)
        distribution.append(
            ProjectDistribution(
                project_id=project.id,
                name=project.name,
                todo=counts[TaskStatus.TODO],
                in_progress=counts[TaskStatus.IN_PROGRESS],
                done=counts[TaskStatus.DONE],
            )
        )
    return distribution


def _sort_key(timestamp: datetime) -> datetime:
    # Stored timestamps written without an offset are UTC
    return timestamp if timestamp.tzinfo else timestamp.replace(tzinfo=UTC)


def recent_activity(projects: Sequence[Project], limit: int = 5) -> list[ActivityEntry]:
    """The newest activity entries across all projects, newest first."""
    entries = [
        ActivityEntry(project_id=project.id, project_name=project.name, activity=activity)
        for project in projects
        for activity in project.activities
    ]
    entries.sort(key=lambda entry: _sort_key(entry.activity.timestamp), reverse=True)
    return entries[: max(limit, 0)]


def dashboard_summary(projects: Sequence[Project]) -> DashboardSummary:
    tasks = _all_tasks(projects)
    return DashboardSummary(
        project_count=len(projects),
        task_count=len(tasks),
        done_count=sum(1 for task in tasks if task.status == TaskStatus.DONE),
        completion_percentage=completion_percentage(tasks),
    )


def dashboard(projects: Sequence[Project]) -> Dashboard:
    return Dashboard(
        summary=dashboard_summary(projects),
        status_breakdown=status_breakdown(projects),
    )


def project_report(project: Project) -> ProjectReport:
    """Printable summary of one project."""
    return ProjectReport(
        project_id=project.id,
        name=project.name,
        deadline=project.deadline,
        completion_percentage=completion_percentage(project.tasks),
        status_counts=_breakdown(project.tasks),
        tasks=project.tasks,
    )
