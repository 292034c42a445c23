"""Project walking: finds the files declaration sources should read."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".vs",
    ".idea",
    ".venv",
    "bin",
    "obj",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
}


@dataclass
class SourceFilter:
    """Allow-list and exclusion rules applied to project-relative paths.

    ``allow`` holds path prefixes compared case-insensitively; an empty
    allow-list admits every file. ``exclude`` holds glob patterns matched
    against the relative path and against each path segment.
    """

    allow: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)

    def admits(self, rel_path: str) -> bool:
        if self.exclude and self._excluded(rel_path):
            return False
        if not self.allow:
            return True
        lowered = rel_path.lower()
        return any(lowered.startswith(_normalise_prefix(prefix)) for prefix in self.allow)

    def _excluded(self, rel_path: str) -> bool:
        parts = rel_path.split("/")
        for pattern in self.exclude:
            cleaned = pattern.strip().rstrip("/")
            if not cleaned:
                continue
            if fnmatchcase(rel_path, cleaned):
                return True
            if "/" not in cleaned and any(fnmatchcase(part, cleaned) for part in parts):
                return True
        return False


def _normalise_prefix(prefix: str) -> str:
    cleaned = prefix.strip().replace("\\", "/").lower()
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    return cleaned.lstrip("/")


def iter_project_files(root: Path, source_filter: SourceFilter | None = None) -> Iterator[Path]:
    """Yield project files in a stable order, honouring ``source_filter``."""
    source_filter = source_filter or SourceFilter()
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        for filename in sorted(filenames):
            path = current_dir / filename
            rel_path = path.relative_to(root).as_posix()
            if source_filter.admits(rel_path):
                yield path


__all__ = ["SourceFilter", "iter_project_files"]
