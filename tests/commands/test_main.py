"""Tests for the top-level app."""

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from taskpilot_cli import __version__
from taskpilot_cli.main import app
from taskpilot_cli.models.config_models import Context

runner = CliRunner()


def test_no_args_shows_help():
    result = runner.invoke(app, [])

    assert "projects" in result.output
    assert "tasks" in result.output


def test_version_short():
    result = runner.invoke(app, ["version", "--short"])

    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_version_shows_context():
    config_service = MagicMock()
    config_service.get_current_context.return_value = Context(
        name="team", type="remote", source="my-firebase"
    )

    with patch(
        "taskpilot_cli.commands.version_command.get_config_service", return_value=config_service
    ):
        result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout
    assert "Context: team" in result.stdout


def test_typo_suggests_command():
    result = runner.invoke(app, ["projcts"])

    assert result.exit_code == 2
    assert "projects" in result.output
