"""Completion percentage and status counting helpers."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from taskpilot_cli.models import Task, TaskStatus


def completion_percentage(tasks: Sequence[Task]) -> int:
    """Return the share of tasks in ``Done`` as a whole percentage.

    Halves round up (1 of 8 done is 13%), so stored values match the ones
    the web front end computes for the same task list.

    Args:
        tasks: Tasks of one project

    Returns:
        Integer in [0, 100]; 0 for an empty task list
    """
    if not tasks:
        return 0
    done = sum(1 for task in tasks if task.status == TaskStatus.DONE)
    return math.floor(100 * done / len(tasks) + 0.5)


def count_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, int]:
    """Count tasks per status. Every status is present, zero or not."""
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1
    return counts
