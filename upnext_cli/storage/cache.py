"""
A simple, file-based store holding one string value under one key.
Used to persist the last derived reading list between runs.
"""

import hashlib
import json
import logging
import time
from pathlib import Path

log = logging.getLogger(__name__)


class CacheStore:
    """
    Persists a single serialized value under a fixed key, with no expiry.

    The value is wrapped in a small JSON envelope and written through a
    temporary file, so a reader never observes a partially written value.
    """

    def __init__(self, cache_dir_path: Path, cache_key: str):
        """
        Initializes the cache store.

        Args:
            cache_dir_path: The directory under which the `cache/` folder is created.
            cache_key: The key the value is stored under.
        """
        self.cache_dir = cache_dir_path / "cache"
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache_key = cache_key

    @property
    def cache_path(self) -> Path:
        """Generates a safe filename for the cache key."""
        hashed_key = hashlib.md5(self.cache_key.encode("utf-8")).hexdigest()  # noqa: S324
        return self.cache_dir / f"{hashed_key}.json"

    @property
    def exists(self) -> bool:
        return self.cache_path.is_file()

    def load(self) -> str | None:
        """Returns the stored value, or None if nothing readable is stored."""
        cache_path = self.cache_path
        if not cache_path.is_file():
            return None

        try:
            with open(cache_path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            log.debug(f"Cache read failed for key '{self.cache_key}': {e}")
            return None

        value = data.get("value") if isinstance(data, dict) else None
        if not isinstance(value, str):
            log.debug(f"Cache entry for key '{self.cache_key}' has no string value.")
            return None
        return value

    def saved_at(self) -> float | None:
        """Returns the Unix time the stored value was written, if known."""
        try:
            with open(self.cache_path, encoding="utf-8") as f:
                timestamp = json.load(f).get("timestamp")
        except (json.JSONDecodeError, OSError, AttributeError):
            return None
        return timestamp if isinstance(timestamp, (int, float)) else None

    def save(self, serialized: str) -> bool:
        """Replaces the stored value."""
        cache_path = self.cache_path
        tmp_path = cache_path.with_suffix(".tmp")
        payload = {
            "key": self.cache_key,
            "timestamp": time.time(),
            "value": serialized,
        }
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(json.dumps(payload))
            tmp_path.replace(cache_path)
            return True
        except OSError as e:
            log.warning(f"Cache write failed for key '{self.cache_key}': {e}")
            return False

    def clear(self) -> bool:
        """Removes the stored value, if any."""
        try:
            self.cache_path.unlink(missing_ok=True)
            return True
        except OSError as e:
            log.error(f"Failed to clear cache: {e}")
            return False
