from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from shopify_bulk_export.cache.base import compute_cache_key
from shopify_bulk_export.core.models import CacheRequest, ResultRecord
from shopify_bulk_export.utils.logging import BaseLogger, SilentLogger

DEFAULT_CACHE_DIR_NAME = ".export-cache"
CACHE_FILE_SUFFIX = ".json"
PROJECT_MARKERS = ("pyproject.toml",)


def find_project_root(start: Optional[Path] = None) -> Optional[Path]:
    """Nearest ancestor of ``start`` (default: cwd) holding a project marker."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if any((directory / marker).is_file() for marker in PROJECT_MARKERS):
            return directory
    return None


def resolve_cache_dir(name: Union[str, Path, None] = None, start: Optional[Path] = None) -> Path:
    """
    Path of the cache directory. It may not exist yet.

    Relative names are placed under the project root (or the working
    directory when no project root is found); absolute paths are used as is.
    """
    base = find_project_root(start) or (start or Path.cwd())
    return base / Path(name or DEFAULT_CACHE_DIR_NAME)


class FileResultCache:
    """
    One JSON file per cache key under a directory.

    The directory is scanned once, when the cache is constructed, and kept as
    an in-memory index; ``put`` adds to that index but it is never rebuilt.
    """

    enabled = True

    def __init__(self, directory: Union[str, Path], logger: Optional[BaseLogger] = None):
        self.log = logger or SilentLogger()
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.log.debug("Loaded cache directory at: %s", self.directory)
        self.index: Dict[str, Path] = self._scan()
        self.log.debug("Loaded cache index with %s entries", len(self.index))

    def _scan(self) -> Dict[str, Path]:
        index: Dict[str, Path] = {}
        for entry in self.directory.iterdir():
            if entry.is_file() and entry.suffix == CACHE_FILE_SUFFIX:
                index[entry.stem] = entry
        return index

    def key(self, request: CacheRequest) -> str:
        return compute_cache_key(request)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}{CACHE_FILE_SUFFIX}"

    def get(self, key: str) -> Optional[List[ResultRecord]]:
        path = self.index.get(key)
        if path is None:
            return None

        self.log.debug("Found cache item at %s for key %s, loading item", path, key)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            self.log.debug("Cache item %s was removed, treating as a miss", path)
        except ValueError as e:
            self.log.error("Unreadable cache item %s, treating as a miss: %s", path, e)
        del self.index[key]
        return None

    def put(self, key: str, records: List[ResultRecord]) -> None:
        path = self.path_for(key)
        self.log.debug("Saving file to cache, with key %s and path %s", key, path)

        # Temp file + os.replace: concurrent writers of the same key never
        # leave a torn file, the last one simply wins.
        fd, tmp_path = tempfile.mkstemp(dir=str(self.directory), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        self.index[key] = path
