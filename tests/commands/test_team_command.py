"""Tests for team commands."""
# pylint: disable=redefined-outer-name

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from taskpilot_cli.commands.team import app
from taskpilot_cli.models import DuplicateError

runner = CliRunner()


@pytest.fixture
def mock_user_service(alice, bob):
    service_mock = MagicMock()
    service_mock.list_users = AsyncMock(return_value=[alice, bob])
    service_mock.add_user = AsyncMock(return_value=bob)
    with patch("taskpilot_cli.commands.team.get_user_service", return_value=service_mock):
        yield service_mock


def test_list(mock_user_service):
    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0
    assert "[AS] Alice Smith" in result.stdout
    assert "Bob Jones" in result.stdout


def test_list_quiet(mock_user_service):
    result = runner.invoke(app, ["list", "-o", "quiet"])

    assert result.exit_code == 0
    assert result.stdout.split() == ["u-alice", "u-bob"]


def test_invite(mock_user_service):
    result = runner.invoke(app, ["invite", "bob@example.com", "--name", "Bob Jones", "-o", "json"])

    assert result.exit_code == 0
    mock_user_service.add_user.assert_awaited_once_with("Bob Jones", "bob@example.com")
    assert "Invited Bob Jones" in result.stdout


def test_invite_duplicate(mock_user_service):
    mock_user_service.add_user.side_effect = DuplicateError(
        "A user with this email already exists."
    )

    result = runner.invoke(app, ["invite", "bob@example.com"])

    assert result.exit_code == 2
    assert "already exists" in result.stdout
