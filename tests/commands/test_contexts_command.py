"""Tests for context commands."""
# pylint: disable=redefined-outer-name

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from taskpilot_cli.commands.contexts import app
from taskpilot_cli.models.config_models import Context

runner = CliRunner()


@pytest.fixture
def config_service(mock_config_service):
    with patch(
        "taskpilot_cli.commands.contexts.get_config_service", return_value=mock_config_service
    ):
        yield mock_config_service


def test_list(config_service):
    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0
    assert "default" in result.stdout
    assert "*" in result.stdout


def test_list_json(config_service):
    result = runner.invoke(app, ["list", "-o", "json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)[0]["type"] == "local"


def test_use_current(config_service):
    result = runner.invoke(app, ["use", "default"])

    assert result.exit_code == 0
    assert "Already using" in result.stdout
    config_service.use_context.assert_not_called()


def test_use_remote_without_session(config_service):
    config_service.use_context.return_value = Context(
        name="team", type="remote", source="my-firebase"
    )
    config_service.load_session.return_value = None

    result = runner.invoke(app, ["use", "team"])

    assert result.exit_code == 0
    config_service.use_context.assert_called_once_with("team")
    assert "taskpilot auth login" in result.stdout


def test_use_unknown(config_service):
    config_service.use_context.side_effect = ValueError("Context 'nope' not found")

    result = runner.invoke(app, ["use", "nope"])

    assert result.exit_code == 2
    assert "not found" in result.stdout


def test_add(config_service):
    result = runner.invoke(
        app, ["add", "team", "my-firebase", "--type", "remote", "--use"]
    )

    assert result.exit_code == 0
    added = config_service.add_context.call_args[0][0]
    assert added.name == "team"
    assert added.type == "remote"
    assert added.source == "my-firebase"
    config_service.use_context.assert_called_once_with("team")


def test_add_invalid_type(config_service):
    result = runner.invoke(app, ["add", "team", "x", "--type", "cloud"])

    assert result.exit_code == 2
    config_service.add_context.assert_not_called()


def test_add_empty_source(config_service):
    result = runner.invoke(app, ["add", "team", "  "])

    assert result.exit_code == 2
    config_service.add_context.assert_not_called()
