"""Source file enumeration for a workspace root.

Excluded directories are matched by name at any depth and pruned before
descent, so nothing below ``node_modules`` is ever stat'ed.
"""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from sourcetruth.config.models import WorkspaceConfig

log = structlog.get_logger(__name__)


class Workspace:
    """
    Enumerates JavaScript/TypeScript sources under a root directory.

    Usage::

        workspace = Workspace("/repo")
        for path in workspace.source_files():
            ...
        workspace.relative("/repo/src/app.ts")   # "src/app.ts"
    """

    def __init__(self, root: str | Path, config: WorkspaceConfig | None = None) -> None:
        self.root = os.path.abspath(os.fspath(root))
        self._config = config or WorkspaceConfig()
        self._extensions = frozenset(self._config.include_extensions)
        self._excluded = frozenset(self._config.exclude_dirs)

    def is_source_file(self, path: str | Path) -> bool:
        return os.path.splitext(os.fspath(path))[1] in self._extensions

    def source_files(self) -> list[str]:
        """Absolute paths of all source files, sorted."""
        max_bytes = self._config.max_file_size_kb * 1024
        files: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            # Prune in-place: excluded dirs are never descended into
            dirnames[:] = [d for d in dirnames if d not in self._excluded]
            for filename in filenames:
                if not self.is_source_file(filename):
                    continue
                path = os.path.join(dirpath, filename)
                try:
                    size = os.path.getsize(path)
                except OSError:
                    continue
                if size > max_bytes:
                    log.debug("workspace.skip_large", path=path, size=size)
                    continue
                files.append(path)
        files.sort()
        log.debug("workspace.scanned", root=self.root, files=len(files))
        return files

    def resolve(self, path: str | Path) -> str:
        """Absolute path; relative paths are taken from the workspace root."""
        raw = os.fspath(path)
        if os.path.isabs(raw):
            return os.path.normpath(raw)
        return os.path.normpath(os.path.join(self.root, raw))

    def relative(self, path: str | Path) -> str:
        """Path relative to the root, with forward slashes."""
        return Path(os.path.relpath(os.fspath(path), self.root)).as_posix()
