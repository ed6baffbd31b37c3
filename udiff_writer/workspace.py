"""
Local workspace — filesystem-backed collaborators for :class:`WriteFileTool`.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .writer import SaveResult

logger = logging.getLogger(__name__)


class LocalFileStore:
    """Read and atomically write files relative to *root*."""

    def __init__(self, root: str = ".") -> None:
        self.root = os.path.abspath(root)

    def resolve(self, path: str) -> str:
        return os.path.join(self.root, path)

    def exists(self, path: str) -> bool:
        return os.path.isfile(self.resolve(path))

    def read(self, path: str) -> str:
        with open(self.resolve(path), "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write(self, path: str, content: str) -> None:
        """Write *content* via temp file + rename."""
        abs_path = self.resolve(path)
        parent = os.path.dirname(abs_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        tmp_path = abs_path + ".udiff_tmp"

        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_path, abs_path)
        except OSError:
            # Clean up temp file on failure
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


class LocalPreview:
    """Holds uncommitted content for one file until it is saved or reverted.

    Streamed updates only replace the pending content; the file on disk is
    written by :meth:`save` alone.
    """

    def __init__(self, store: LocalFileStore) -> None:
        self._store = store
        self._path: Optional[str] = None
        self._pending: Optional[str] = None
        self.updates = 0

    def open(self, path: str) -> None:
        self._path = path
        self._pending = None
        logger.debug("[WriteFile] Preview opened for %s", path)

    def is_open(self) -> bool:
        return self._path is not None

    @property
    def pending(self) -> Optional[str]:
        return self._pending

    def update(self, content: str, final: bool) -> None:
        if self._path is None:
            raise RuntimeError("Preview is not open")
        self._pending = content
        self.updates += 1
        if final:
            logger.debug("[WriteFile] Final preview for %s (%d chars)",
                         self._path, len(content))

    def revert(self) -> None:
        if self._path is not None:
            logger.debug("[WriteFile] Reverted preview for %s", self._path)
        self._path = None
        self._pending = None

    def save(self) -> SaveResult:
        if self._path is None or self._pending is None:
            raise RuntimeError("Nothing to save")
        path, content = self._path, self._pending
        self._store.write(path, content)
        logger.info("[WriteFile] Saved %s", path)
        self._path = None
        self._pending = None
        return SaveResult(final_content=content)
