"""TaskPilot CLI - project and task management from the command line."""

__version__ = "0.3.0"
