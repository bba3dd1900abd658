"""Tests for completion percentage and status counts."""

import pytest

from taskpilot_cli.models import TaskStatus
from taskpilot_cli.utils.progress import completion_percentage, count_by_status


def test_no_tasks_is_zero():
    assert completion_percentage([]) == 0


@pytest.mark.parametrize(
    ("done", "total", "expected"),
    [
        (1, 3, 33),
        (2, 3, 67),
        (1, 2, 50),
        (1, 8, 13),
        (3, 3, 100),
        (0, 4, 0),
    ],
)
def test_rounds_half_up(make_task, done, total, expected):
    tasks = [
        make_task(f"Task {i}", TaskStatus.DONE if i < done else TaskStatus.TODO)
        for i in range(total)
    ]
    assert completion_percentage(tasks) == expected


def test_only_done_counts(make_task):
    tasks = [
        make_task("a", TaskStatus.IN_PROGRESS),
        make_task("b", TaskStatus.BACKLOG),
        make_task("c", TaskStatus.DONE),
        make_task("d", TaskStatus.TODO),
    ]
    assert completion_percentage(tasks) == 25


def test_count_by_status_has_every_status(make_task):
    counts = count_by_status([make_task("a", TaskStatus.DONE), make_task("b", TaskStatus.DONE)])

    assert counts == {
        TaskStatus.BACKLOG: 0,
        TaskStatus.TODO: 0,
        TaskStatus.IN_PROGRESS: 0,
        TaskStatus.DONE: 2,
    }


@pytest.mark.parametrize("total", range(1, 13))
def test_finishing_tasks_never_lowers_completion(make_task, total):
    tasks = [make_task(f"Task {i}") for i in range(total)]
    seen = []
    for task in tasks:
        seen.append(completion_percentage(tasks))
        task.status = TaskStatus.DONE
    seen.append(completion_percentage(tasks))

    assert seen == sorted(seen)
    assert seen[-1] == 100
