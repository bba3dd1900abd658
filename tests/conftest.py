"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from taskpilot_cli.adapters.sqlite import SqliteDocumentStore
from taskpilot_cli.models import Project, Task, TaskPriority, TaskStatus, User
from taskpilot_cli.models.config_models import AppConfig, Context
from taskpilot_cli.repositories import ProjectRepository, UserRepository
from taskpilot_cli.utils.view_cache import ViewCache


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


def _make_local_config(tmp_path) -> AppConfig:
    """Build a minimal AppConfig pointing at a tmp SQLite vault."""
    db = str(tmp_path / "test.db")
    ctx = Context(name="default", type="local", source=db)
    return AppConfig(current_context_name="default", contexts=[ctx])


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config, data and cache files land in
    *tmp_path* only. Also clears the lru_cache so each test gets a fresh
    service instance.
    """
    from taskpilot_cli.services.config_service import get_config_service

    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with (
        patch("taskpilot_cli.services.config_service.user_config_dir", return_value=tmpdir),
        patch("taskpilot_cli.services.config_service.user_data_dir", return_value=tmpdir),
        patch("taskpilot_cli.services.config_service.user_cache_dir", return_value=tmpdir),
    ):
        from taskpilot_cli.services.config_service import ConfigService

        svc = ConfigService()
        yield svc
    get_config_service.cache_clear()


@pytest.fixture()
def mock_config_service(tmp_path):
    """Provide a MagicMock that stands in for get_config_service()."""
    config = _make_local_config(tmp_path)

    svc = MagicMock()
    svc.load_config.return_value = config
    svc.config = config
    svc.save_config = MagicMock()
    svc.get_current_context.return_value = config.contexts[0]
    svc.list_contexts.return_value = config.contexts
    return svc


# ---------------------------------------------------------------------------
# Command isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def bypass_auth():
    """Skip authentication checks in all tests by default."""
    with patch("taskpilot_cli.commands.decorators._require_auth"):
        yield


@pytest.fixture(autouse=True)
def no_backend_close():
    """Commands close the active backend on exit; never build a real one."""
    with patch("taskpilot_cli.commands.decorators.close_storage", new=AsyncMock()):
        yield


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def alice() -> User:
    return User(
        id="u-alice",
        name="Alice Smith",
        email="alice@example.com",
        avatar_url="https://picsum.photos/seed/Alice Smith/200",
        initials="AS",
    )


@pytest.fixture()
def bob() -> User:
    return User(id="u-bob", name="Bob Jones", email="bob@example.com", initials="BJ")


def _make_task(
    title: str,
    status: TaskStatus = TaskStatus.TODO,
    task_id: str | None = None,
    assignee: User | None = None,
) -> Task:
    return Task(
        id=task_id or f"t-{title.lower().replace(' ', '-')}",
        title=title,
        status=status,
        priority=TaskPriority.MEDIUM,
        assignee=assignee,
    )


def _make_project(owner: User, tasks: list[Task] | None = None, name: str = "Launch") -> Project:
    return Project(
        id="",
        name=name,
        owner=owner,
        deadline=datetime(2030, 1, 31, tzinfo=UTC),
        progress_notes="Kickoff done.",
        tasks=tasks or [],
    )


@pytest.fixture()
def make_task():
    """Factory for tasks: make_task(title, status=..., task_id=..., assignee=...)."""
    return _make_task


@pytest.fixture()
def make_project():
    """Factory for unsaved projects: make_project(owner, tasks, name)."""
    return _make_project


@pytest.fixture()
def store(tmp_path):
    """A document store over a fresh vault file."""
    store = SqliteDocumentStore(db_path=tmp_path / "vault.db")
    yield store
    store.database.close()


@pytest.fixture()
def project_repository(store) -> ProjectRepository:
    return ProjectRepository(store)


@pytest.fixture()
def user_repository(store) -> UserRepository:
    return UserRepository(store)


@pytest.fixture()
def cache() -> ViewCache:
    """View cache kept in memory only."""
    return ViewCache(cache_file=None)
