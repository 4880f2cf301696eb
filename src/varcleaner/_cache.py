"""Per-file result cache keyed by file content.

Results are stored as JSON under .cache/varcleaner/ and reused while the file
content and the run settings stay the same. An unchanged mtime and size skip
the content hash.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Any

__all__ = ["ResultCache"]

logger = logging.getLogger("varcleaner.cache")


class ResultCache:
    """Content-hash-based cache of per-file violations.

    Example:
        >>> cache = ResultCache(settings_key="varcleaner|ignore-functions=test_*")
        >>> violations = cache.get(Path("foo.py"))
        >>> if violations is None:
        ...     violations = check_file("foo.py")
        ...     cache.set(Path("foo.py"), violations)
    """

    CACHE_VERSION = "1.0.0"
    DEFAULT_CACHE_DIR = Path(".cache/varcleaner")

    def __init__(
        self,
        cache_dir: Path | None = None,
        settings_key: str = "",
        cache_version: str | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            cache_dir: Cache directory (default: .cache/varcleaner/)
            settings_key: Fingerprint of the settings results depend on
            cache_version: Cache format version (default: 1.0.0)
        """
        self.cache_dir = cache_dir or self.DEFAULT_CACHE_DIR
        self.settings_key = settings_key
        self.cache_version = cache_version or self.CACHE_VERSION
        self._ensure_cache_dir()

    def _ensure_cache_dir(self) -> None:
        """Create cache directory with CACHEDIR.TAG marker."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        # See: https://bford.info/cachedir/
        tag_file = self.cache_dir / "CACHEDIR.TAG"
        if not tag_file.exists():
            tag_file.write_text(
                "Signature: 8a477f597d28d172789f06886806bc55\n"
                "# This directory is a cache directory for varcleaner.\n"
                "# It is safe to delete this directory to clear the cache.\n"
            )

    def get(self, filepath: Path) -> list[dict[str, Any]] | None:
        """Return cached violations for a file if still valid.

        Args:
            filepath: Path to Python file

        Returns:
            Serialized violations, or None on a cache miss
        """
        try:
            stat = filepath.stat()
            cache_file = self._get_cache_path(filepath)

            if not cache_file.exists():
                return None

            with open(cache_file, encoding="utf-8") as f:
                entry = json.load(f)

            if entry.get("version") != self.cache_version:
                return None
            if entry.get("settings_key") != self.settings_key:
                return None

            if entry.get("mtime") == stat.st_mtime_ns and entry.get("size") == stat.st_size:
                return entry["violations"]

            if entry.get("file_hash") == self.compute_file_hash(filepath):
                # Same content, refresh mtime for the next fast-path hit
                entry["mtime"] = stat.st_mtime_ns
                entry["size"] = stat.st_size
                self._write_cache(cache_file, entry)
                return entry["violations"]

            return None

        except (OSError, json.JSONDecodeError, KeyError) as error:
            logger.debug("Cache read failed for %s: %s", filepath, repr(error))
            return None

    def set(self, filepath: Path, violations: list[dict[str, Any]]) -> None:
        """Store violations for a file.

        Args:
            filepath: Path to Python file
            violations: Serialized violations
        """
        try:
            stat = filepath.stat()
            entry = {
                "version": self.cache_version,
                "settings_key": self.settings_key,
                "file_hash": self.compute_file_hash(filepath),
                "mtime": stat.st_mtime_ns,
                "size": stat.st_size,
                "checked_at": int(time.time()),
                "violations": violations,
            }
            self._write_cache(self._get_cache_path(filepath), entry)
        except (OSError, TypeError, ValueError) as error:
            logger.warning("Cache write failed for %s: %s", filepath, repr(error))

    def _get_cache_path(self, filepath: Path) -> Path:
        """Get cache file path for a source file.

        Two-level layout: .cache/varcleaner/ab/abc123...def.json
        """
        path_hash = hashlib.sha1(str(filepath.resolve()).encode()).hexdigest()
        cache_subdir = self.cache_dir / path_hash[:2]
        cache_subdir.mkdir(exist_ok=True)
        return cache_subdir / f"{path_hash}.json"

    @staticmethod
    def compute_file_hash(filepath: Path) -> str:
        """Compute SHA-1 hex digest of file content."""
        sha1 = hashlib.sha1()
        with open(filepath, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                sha1.update(chunk)
        return sha1.hexdigest()

    def _write_cache(self, cache_file: Path, data: dict[str, Any]) -> None:
        """Write a cache file through a temp file and rename."""
        temp_file = cache_file.with_suffix(".tmp")
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            temp_file.replace(cache_file)
        finally:
            if temp_file.exists():  # pragma: no cover
                temp_file.unlink()

    def clear(self) -> int:
        """Delete all cache entries.

        Returns:
            Number of deleted entries
        """
        removed = 0
        for cache_file in self.cache_dir.rglob("*.json"):
            try:
                cache_file.unlink()
                removed += 1
            except OSError as error:
                logger.warning("Failed to remove %s: %s", cache_file, repr(error))
        return removed
