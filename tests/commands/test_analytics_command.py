"""Tests for analytics commands."""
# pylint: disable=redefined-outer-name

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from taskpilot_cli.commands.analytics import app
from taskpilot_cli.models import Activity, TaskStatus
from taskpilot_cli.services import analytics_service

runner = CliRunner()


@pytest.fixture
def projects(make_project, make_task, alice):
    launch = make_project(
        alice,
        [make_task("Design", TaskStatus.DONE), make_task("Ship", TaskStatus.IN_PROGRESS)],
    ).model_copy(update={"id": "p1"})
    now = datetime.now(UTC)
    launch.activities = [
        Activity(id=f"a{i}", text=f"change {i}", timestamp=now - timedelta(minutes=10 - i), user=alice)
        for i in range(3)
    ]
    return [launch]


@pytest.fixture
def mock_project_service(projects):
    service_mock = MagicMock()
    service_mock.list_projects = AsyncMock(return_value=projects)
    service_mock.get_dashboard = AsyncMock(return_value=analytics_service.dashboard(projects))
    with patch("taskpilot_cli.commands.analytics.get_project_service", return_value=service_mock):
        yield service_mock


def test_overview_pretty(mock_project_service):
    result = runner.invoke(app, ["overview"])

    assert result.exit_code == 0
    assert "1 projects" in result.stdout
    assert "50%" in result.stdout
    assert "In Progress" in result.stdout


def test_overview_json(mock_project_service):
    result = runner.invoke(app, ["overview", "-o", "json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["task_count"] == 2
    assert data["completion_percentage"] == 50
    assert data["status_breakdown"] == [
        {"status": "Done", "count": 1},
        {"status": "In Progress", "count": 1},
    ]


def test_overview_reads_dashboard_view(mock_project_service):
    result = runner.invoke(app, ["overview", "-o", "json"])

    assert result.exit_code == 0
    mock_project_service.get_dashboard.assert_awaited_once()
    mock_project_service.list_projects.assert_not_awaited()


def test_distribution(mock_project_service):
    result = runner.invoke(app, ["distribution", "-o", "json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == [
        {"project_id": "p1", "name": "Launch", "todo": 0, "in_progress": 1, "done": 1}
    ]


def test_distribution_table(mock_project_service):
    result = runner.invoke(app, ["distribution"])

    assert result.exit_code == 0
    assert "Launch" in result.stdout


def test_activity(mock_project_service):
    result = runner.invoke(app, ["activity", "--limit", "2", "-o", "json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [entry["text"] for entry in data] == ["change 2", "change 1"]
    assert data[0]["project_name"] == "Launch"


def test_activity_pretty(mock_project_service):
    result = runner.invoke(app, ["activity"])

    assert result.exit_code == 0
    assert "Alice Smith change 2" in result.stdout


def test_activity_limit_must_be_positive(mock_project_service):
    result = runner.invoke(app, ["activity", "--limit", "0"])

    assert result.exit_code == 2
