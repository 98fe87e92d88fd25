"""
Local file-system collaborator — reads fresh base snapshots and writes
materialized content atomically.
"""

from __future__ import annotations

import logging
import os
import shutil

logger = logging.getLogger(__name__)

_TMP_SUFFIX = ".change_review_tmp"


class LocalFileSystem:
    """Read/write collaborator rooted at *root*.

    Paths handed in by the store are joined onto *root* unless absolute.
    """

    def __init__(self, root: str = ".") -> None:
        self._root = os.path.abspath(root)

    @property
    def root(self) -> str:
        return self._root

    def resolve(self, path: str) -> str:
        return os.path.abspath(os.path.join(self._root, path))

    def read_text(self, path: str) -> str:
        """Current content of *path*; empty string if it does not exist."""
        abs_path = self.resolve(path)
        if not os.path.isfile(abs_path):
            return ""
        # newline="" keeps \r\n intact so diffs see the bytes on disk
        with open(abs_path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, path: str, content: str) -> None:
        """Write *content* to *path* atomically via temp file + rename."""
        abs_path = self.resolve(path)
        parent = os.path.dirname(abs_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        tmp_path = abs_path + _TMP_SUFFIX

        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)

            # On Windows, os.rename fails if destination exists
            if os.path.exists(abs_path):
                shutil.move(tmp_path, abs_path)
            else:
                os.rename(tmp_path, abs_path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        logger.debug("[Review] Wrote %d chars to %s", len(content), abs_path)

    def delete(self, path: str) -> None:
        """Remove *path*; a file that is already gone is not an error."""
        abs_path = self.resolve(path)
        try:
            os.unlink(abs_path)
        except FileNotFoundError:
            return
        logger.debug("[Review] Deleted %s", abs_path)
