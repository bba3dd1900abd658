"""Local file storage for the SQLite vault."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

from taskpilot_cli.models import BackendError
from taskpilot_cli.repositories import FileStorage


class LocalFileStorage(FileStorage):
    """Stores uploads in a directory next to the vault.

    Object paths map to files below ``root``; the returned URL is a
    ``file://`` URI of the stored copy.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        parts = [p for p in PurePosixPath(path).parts if p not in ("", ".", "..", "/")]
        if not parts:
            raise ValueError(f"Invalid object path: {path!r}")
        return self.root.joinpath(*parts)

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            os.chmod(target, 0o600)
        except OSError as e:
            raise BackendError(f"Could not store {path}: {e}") from e
        return target.resolve().as_uri()
