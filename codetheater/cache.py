"""
codetheater.cache - Commit history cache.

Stores extraction results as JSON so repeated runs over the same range
skip the git calls. Entries expire after a TTL. The cache is best
effort: unreadable entries are treated as misses.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from codetheater.exceptions import CacheError
from codetheater.git.extractor import ExtractionResult
from codetheater.io import read_json, write_json

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


def cache_key(repo_path: str, from_ref: str | None = None, to_ref: str | None = None) -> str:
    data = f"{repo_path}:{from_ref or 'HEAD'}:{to_ref or 'HEAD'}"
    return hashlib.md5(data.encode("utf-8")).hexdigest()


class CommitCache:
    """TTL cache of ExtractionResult, one JSON file per commit range."""

    def __init__(self, cache_dir: Path, ttl: timedelta = DEFAULT_TTL) -> None:
        self.cache_dir = cache_dir
        self.ttl = ttl

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def get(
        self,
        repo_path: str,
        from_ref: str | None = None,
        to_ref: str | None = None,
        now: datetime | None = None,
    ) -> ExtractionResult | None:
        """Return the cached extraction, or None on a miss or expiry."""
        path = self._path(cache_key(repo_path, from_ref, to_ref))
        if not path.exists():
            return None

        try:
            entry = read_json(path)
            cached_at = datetime.fromisoformat(entry["cached_at"])
            result = ExtractionResult.model_validate(entry["extraction"])
        except (OSError, json.JSONDecodeError, KeyError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable cache entry %s: %s", path.name, e)
            path.unlink(missing_ok=True)
            return None

        now = now or datetime.now(timezone.utc)
        if now - cached_at > self.ttl:
            logger.debug("Cache entry %s expired", path.name)
            path.unlink(missing_ok=True)
            return None

        return result

    def set(
        self,
        repo_path: str,
        from_ref: str | None,
        to_ref: str | None,
        result: ExtractionResult,
    ) -> None:
        path = self._path(cache_key(repo_path, from_ref, to_ref))
        entry = {
            "cached_at": datetime.now(timezone.utc).isoformat(),
            "extraction": result.model_dump(mode="json"),
        }
        try:
            write_json(path, entry)
        except OSError as e:
            logger.warning("Could not write commit cache: %s", e)

    def clear(self) -> int:
        """Delete all cache entries. Returns the number removed.

        Raises:
            CacheError: If an entry cannot be deleted
        """
        if not self.cache_dir.exists():
            return 0
        removed = 0
        try:
            for path in self.cache_dir.glob("*.json"):
                path.unlink(missing_ok=True)
                removed += 1
        except OSError as e:
            raise CacheError(f"Could not clear cache in {self.cache_dir}: {e}") from e
        return removed
