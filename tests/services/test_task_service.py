"""Tests for TaskService."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from taskpilot_cli.models import (
    Activity,
    BackendError,
    ConflictError,
    NotFoundError,
    TaskCreate,
    TaskPriority,
    TaskStatus,
)
from taskpilot_cli.services.project_service import ProjectService
from taskpilot_cli.services.task_service import TaskService
from taskpilot_cli.utils.view_cache import DASHBOARD_VIEW, PROJECTS_VIEW, ViewCache, project_view


@pytest.fixture()
def service(project_repository, cache):
    return TaskService(project_repository, cache)


@pytest_asyncio.fixture()
async def project_id(project_repository, make_project, make_task, alice):
    project = make_project(
        alice,
        [
            make_task("Design", TaskStatus.DONE, task_id="t1"),
            make_task("Build", TaskStatus.DONE, task_id="t2"),
            make_task("Ship", TaskStatus.TODO, task_id="t3"),
        ],
    )
    return await project_repository.create(project)


class TestAddTask:
    @pytest.mark.asyncio
    async def test_appends_task_and_activity(self, service, project_repository, project_id, alice):
        task = await service.add_task(
            project_id,
            TaskCreate(title="Polish", status=TaskStatus.BACKLOG, priority=TaskPriority.HIGH),
            alice,
        )

        project = await project_repository.get(project_id)
        assert [t.title for t in project.tasks] == ["Design", "Build", "Ship", "Polish"]
        assert project.tasks[-1] == task
        assert task.priority is TaskPriority.HIGH
        assert project.completion_percentage == 50
        assert project.activities[-1].text == 'created a new task: "Polish"'
        assert project.activities[-1].user == alice

    @pytest.mark.asyncio
    async def test_activity_is_newer_than_log(
        self, service, project_repository, make_project, make_task, alice, bob
    ):
        earlier = datetime.now(UTC) - timedelta(minutes=5)
        prior = [
            Activity(id="a1", text='created a new task: "Ship"', timestamp=earlier, user=bob),
            Activity(
                id="a2",
                text='moved task "Ship" from Backlog to To-do',
                timestamp=earlier + timedelta(minutes=1),
                user=bob,
            ),
        ]
        project = make_project(alice, [make_task("Ship")]).model_copy(update={"activities": prior})
        project_id = await project_repository.create(project)

        await service.add_task(project_id, TaskCreate(title="Polish"), alice)

        activities = (await project_repository.get(project_id)).activities
        assert [a.id for a in activities[:2]] == ["a1", "a2"]
        assert activities[-1].text == 'created a new task: "Polish"'
        assert activities[-1].timestamp > max(a.timestamp for a in prior)

    @pytest.mark.asyncio
    async def test_stored_percentage_matches(self, service, store, project_id, alice):
        await service.add_task(project_id, TaskCreate(title="Polish"), alice)

        stored = (await store.get("projects", project_id)).data
        assert stored["completionPercentage"] == 50

    @pytest.mark.asyncio
    async def test_assignee_is_mentioned(self, service, project_repository, project_id, alice, bob):
        await service.add_task(project_id, TaskCreate(title="Polish", assignee=bob), alice)

        project = await project_repository.get(project_id)
        assert project.tasks[-1].assignee == bob
        assert project.activities[-1].text == (
            'created a new task: "Polish" and assigned it to Bob Jones'
        )

    @pytest.mark.asyncio
    async def test_due_date_is_kept(self, service, project_repository, project_id, alice):
        due = datetime(2030, 2, 1, tzinfo=UTC)
        await service.add_task(project_id, TaskCreate(title="Polish", due_date=due), alice)

        assert (await project_repository.get(project_id)).tasks[-1].due_date == due

    @pytest.mark.asyncio
    async def test_unknown_project_writes_nothing(self, alice):
        repo = MagicMock()
        repo.get = AsyncMock(return_value=None)
        repo.update_fields = AsyncMock()
        service = TaskService(repo, MagicMock())

        with pytest.raises(NotFoundError, match="Project not found"):
            await service.add_task("nope", TaskCreate(title="x"), alice)
        repo.update_fields.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalidates_views(self, service, cache, project_id, alice):
        for path in (project_view(project_id), DASHBOARD_VIEW, PROJECTS_VIEW):
            cache.put(path, {})

        await service.add_task(project_id, TaskCreate(title="x"), alice)

        for path in (project_view(project_id), DASHBOARD_VIEW, PROJECTS_VIEW):
            assert cache.get(path) is None

    @pytest.mark.asyncio
    async def test_read_failure(self, cache, alice):
        repo = MagicMock()
        repo.get = AsyncMock(side_effect=BackendError("down"))
        with pytest.raises(BackendError, match="Failed to create task"):
            await TaskService(repo, cache).add_task("p1", TaskCreate(title="x"), alice)


class TestUpdateTask:
    @pytest.mark.asyncio
    async def test_move_logs_status_change(self, service, project_repository, project_id, alice):
        await service.move_task(project_id, "t3", TaskStatus.IN_PROGRESS, alice)

        project = await project_repository.get(project_id)
        assert project.find_task("t3").status is TaskStatus.IN_PROGRESS
        assert project.activities[-1].text == 'moved task "Ship" from To-do to In Progress'
        assert project.completion_percentage == 67

    @pytest.mark.asyncio
    async def test_move_to_done(self, service, project_repository, project_id, alice):
        await service.move_task(project_id, "t3", TaskStatus.DONE, alice)

        assert (await project_repository.get(project_id)).completion_percentage == 100

    @pytest.mark.asyncio
    async def test_order_is_preserved(self, service, project_repository, project_id, alice):
        project = await project_repository.get(project_id)
        renamed = project.find_task("t2").model_copy(update={"title": "Build it"})

        await service.update_task(project_id, renamed, alice)

        project = await project_repository.get(project_id)
        assert [t.id for t in project.tasks] == ["t1", "t2", "t3"]
        assert project.tasks[1].title == "Build it"
        assert project.activities[-1].text == 'updated task "Build it"'

    @pytest.mark.asyncio
    async def test_assign_and_unassign(self, service, project_repository, project_id, alice, bob):
        await service.assign_task(project_id, "t3", bob, alice)
        await service.assign_task(project_id, "t3", None, alice)

        project = await project_repository.get(project_id)
        assert project.find_task("t3").assignee is None
        assert [a.text for a in project.activities] == [
            'assigned task "Ship" to Bob Jones',
            'unassigned task "Ship"',
        ]

    @pytest.mark.asyncio
    async def test_completion_never_drops_as_tasks_finish(
        self, service, project_repository, make_project, make_task, alice
    ):
        tasks = [make_task(f"Step {i}", task_id=f"s{i}") for i in range(7)]
        project_id = await project_repository.create(make_project(alice, tasks))

        seen = [(await project_repository.get(project_id)).completion_percentage]
        for task in tasks:
            await service.move_task(project_id, task.id, TaskStatus.DONE, alice)
            seen.append((await project_repository.get(project_id)).completion_percentage)

        assert seen == sorted(seen)
        assert seen[0] == 0
        assert seen[-1] == 100

    @pytest.mark.asyncio
    async def test_edit_keeps_fields_changed_elsewhere(
        self, service, project_repository, cache, project_id, alice, bob
    ):
        # Prime the cached view, then let another process move the task
        stale = await ProjectService(project_repository, cache).get_project(project_id)
        other = TaskService(project_repository, ViewCache(cache_file=None))
        await other.move_task(project_id, "t3", TaskStatus.DONE, bob)
        assert stale.find_task("t3").status is TaskStatus.TODO

        await service.edit_task(project_id, "t3", {"title": "Ship it"}, alice)

        project = await project_repository.get(project_id)
        shipped = project.find_task("t3")
        assert shipped.title == "Ship it"
        assert shipped.status is TaskStatus.DONE
        assert project.completion_percentage == 100
        assert [a.text for a in project.activities] == [
            'moved task "Ship" from To-do to Done',
            'updated task "Ship it"',
        ]

    @pytest.mark.asyncio
    async def test_edit_several_fields(self, service, project_repository, project_id, alice):
        due = datetime(2030, 2, 1, tzinfo=UTC)
        edited = await service.edit_task(
            project_id, "t3", {"priority": TaskPriority.HIGH, "due_date": due}, alice
        )

        stored = (await project_repository.get(project_id)).find_task("t3")
        assert stored.model_dump() == edited.model_dump()
        assert stored.priority is TaskPriority.HIGH
        assert stored.due_date == due
        assert stored.title == "Ship"

    @pytest.mark.asyncio
    async def test_edit_unknown_task(self, service, project_repository, project_id, alice):
        with pytest.raises(NotFoundError, match="Task not found"):
            await service.edit_task(project_id, "nope", {"title": "x"}, alice)

        assert (await project_repository.get(project_id)).activities == []

    @pytest.mark.asyncio
    async def test_unknown_task(self, service, project_repository, project_id, make_task, alice):
        with pytest.raises(NotFoundError, match="Task not found"):
            await service.update_task(project_id, make_task("Ghost", task_id="nope"), alice)

        assert (await project_repository.get(project_id)).activities == []

    @pytest.mark.asyncio
    async def test_unknown_project(self, service, make_task, alice):
        with pytest.raises(NotFoundError, match="Project not found"):
            await service.move_task("nope", "t1", TaskStatus.DONE, alice)

    @pytest.mark.asyncio
    async def test_concurrent_write_conflicts(self, service, store, project_repository, project_id, alice):
        original_get = project_repository.get

        async def get_then_race(pid):
            project = await original_get(pid)
            # Another writer changes the project after it was read
            await store.update("projects", pid, {"name": "Changed elsewhere"})
            return project

        project_repository.get = get_then_race

        with pytest.raises(ConflictError):
            await service.move_task(project_id, "t3", TaskStatus.DONE, alice)

        project = await original_get(project_id)
        assert project.find_task("t3").status is TaskStatus.TODO
        assert project.name == "Changed elsewhere"

    @pytest.mark.asyncio
    async def test_write_failure(self, project_repository, cache, project_id, alice):
        project_repository.update_fields = AsyncMock(side_effect=BackendError("down"))
        service = TaskService(project_repository, cache)

        with pytest.raises(BackendError, match="Failed to update task"):
            await service.move_task(project_id, "t3", TaskStatus.DONE, alice)
