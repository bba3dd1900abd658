"""Cache of rendered views, invalidated by path after mutations."""

import json
import time
from pathlib import Path
from typing import Any

from platformdirs import user_cache_dir

from taskpilot_cli.utils.logger import get_logger

logger = get_logger(__name__)

CACHE_DIR = Path(user_cache_dir("taskpilot_cli"))
VIEW_CACHE_FILE = CACHE_DIR / "views.json"
CACHE_TTL = 300  # 5 minutes

PROJECTS_VIEW = "/projects"
DASHBOARD_VIEW = "/dashboard"
TEAM_VIEW = "/team"
SETTINGS_VIEW = "/settings"


def project_view(project_id: str) -> str:
    return f"{PROJECTS_VIEW}/{project_id}"


class ViewCache:
    """Time-limited cache of view data keyed by view path.

    Entries are JSON values stored with the time they were written. With no
    cache file the entries live in memory for the life of the process.
    """

    def __init__(self, cache_file: Path | None = VIEW_CACHE_FILE, ttl: int = CACHE_TTL):
        self.cache_file = cache_file
        self.ttl = ttl
        self._memory: dict[str, dict[str, Any]] = {}

    def _load_cache(self) -> dict[str, dict[str, Any]]:
        """Load cache entries.

        Returns:
            Dict mapping view path to {"timestamp": ..., "value": ...}
        """
        if self.cache_file is None:
            return self._memory
        if not self.cache_file.exists():
            return {}

        try:
            data = json.loads(self.cache_file.read_text())
        except (OSError, ValueError) as e:
            logger.warning("ignoring unreadable view cache %s: %s", self.cache_file, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_cache(self, cache: dict[str, dict[str, Any]]) -> None:
        if self.cache_file is None:
            self._memory = cache
            return
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            self.cache_file.write_text(json.dumps(cache, indent=2))
        except (OSError, TypeError) as e:
            logger.warning("could not write view cache %s: %s", self.cache_file, e)

    def _is_fresh(self, entry: dict[str, Any], now: float) -> bool:
        return now - entry.get("timestamp", 0) < self.ttl

    def get(self, path: str) -> Any | None:
        """Get the cached value of a view.

        Args:
            path: View path, e.g. "/projects"

        Returns:
            The cached value, or None if missing or expired
        """
        entry = self._load_cache().get(path)
        if not entry or not self._is_fresh(entry, time.time()):
            return None
        return entry.get("value")

    def put(self, path: str, value: Any) -> None:
        """Cache a JSON-serializable value for a view."""
        now = time.time()
        cache = {
            key: entry
            for key, entry in self._load_cache().items()
            if self._is_fresh(entry, now)
        }
        cache[path] = {"timestamp": now, "value": value}
        self._save_cache(cache)

    def invalidate(self, *paths: str) -> None:
        """Drop cached views so the next read goes to the backend."""
        cache = self._load_cache()
        removed = [path for path in paths if cache.pop(path, None) is not None]
        if removed:
            logger.debug("invalidated views: %s", ", ".join(removed))
            self._save_cache(cache)

    def clear(self) -> None:
        """Clear all entries from cache."""
        self._memory = {}
        if self.cache_file is not None and self.cache_file.exists():
            try:
                self.cache_file.unlink()
            except OSError as e:
                logger.warning("could not remove view cache %s: %s", self.cache_file, e)
