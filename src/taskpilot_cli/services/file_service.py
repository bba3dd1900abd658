"""File service - Project attachments."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from taskpilot_cli.models import BackendError, FileRecord, NotFoundError, TaskPilotError
from taskpilot_cli.repositories import FileStorage
from taskpilot_cli.services.project_service import ProjectService
from taskpilot_cli.utils.logger import get_logger

logger = get_logger(__name__)

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_bytes(size: int, decimals: int = 2) -> str:
    """Human-readable file size, e.g. ``1536`` -> ``"1.5 KB"``.

    Trailing zeros are dropped; sizes beyond terabytes stay in TB.
    """
    if size <= 0:
        return "0 Bytes"
    decimals = max(decimals, 0)
    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / 1024**exponent, decimals)
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[exponent]}"


def object_path(project_id: str, filename: str) -> str:
    return f"projects/{project_id}/{filename}"


class FileService:
    """Uploads files and records them on their project."""

    def __init__(self, storage: FileStorage, project_service: ProjectService):
        self.storage = storage
        self.project_service = project_service

    async def upload_file(self, project_id: str, path: str | Path | None) -> FileRecord:
        """Upload a local file and attach it to a project.

        The project is checked before any bytes are stored, so an unknown
        project leaves nothing behind in storage.

        Args:
            project_id: Project the file belongs to
            path: Local file to upload

        Returns:
            The FileRecord appended to the project

        Raises:
            ValueError: If no readable file is given
            NotFoundError: If the project does not exist
            BackendError: If the upload or the record fails
        """
        if path is None or not Path(path).is_file():
            raise ValueError("No file provided for upload.")

        source = Path(path)
        content = source.read_bytes()
        content_type = mimetypes.guess_type(source.name)[0] or "application/octet-stream"

        try:
            await self.project_service.require_project(project_id)
            url = await self.storage.upload(
                object_path(project_id, source.name), content, content_type
            )
            record = FileRecord(
                name=source.name,
                type=content_type,
                size=format_bytes(len(content)),
                url=url,
            )
            await self.project_service.add_file_record(project_id, record)
        except NotFoundError:
            raise
        except TaskPilotError as e:
            logger.error("upload of %s to project %s failed: %s", source, project_id, e)
            raise BackendError("File upload failed.") from e

        logger.info("attached %s to project %s", source.name, project_id)
        return record


def get_file_service() -> FileService:
    """Factory function to create a FileService instance."""
    from taskpilot_cli.services.config_service import get_storage_strategy_context
    from taskpilot_cli.services.project_service import get_project_service

    return FileService(get_storage_strategy_context().file_storage, get_project_service())
