"""
Filesystem-backed workspace host.
Serves editor signals supplied by the caller and enumerates a directory tree.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, List, Sequence

from ..interfaces import IWorkspaceHost
from .models import ActiveDocument, Diagnostic

logger = logging.getLogger(__name__)

# Build output, caches and vendored dependencies
EXCLUDED_DIRS = frozenset({
    "node_modules", ".git", "dist", "build", "coverage", ".next",
    "__pycache__", "target", "vendor", ".venv", "venv",
})

MAX_WORKSPACE_FILES = 5000


def _walk(root: Path, limit: int) -> List[str]:
    files: List[str] = []
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in EXCLUDED_DIRS)
        rel_dir = Path(current).relative_to(root)
        for filename in sorted(filenames):
            files.append((rel_dir / filename).as_posix())
            if len(files) >= limit:
                logger.warning(f"Workspace listing truncated at {limit} files")
                return files
    return files


class FilesystemWorkspaceHost(IWorkspaceHost):
    """
    Workspace host over a local directory.

    Editor state (active document, diagnostics) is whatever the caller
    passes in; nothing is watched.
    """

    def __init__(
        self,
        root: Optional[str],
        active_document: Optional[ActiveDocument] = None,
        diagnostics: Optional[Sequence[Diagnostic]] = None,
        semantic_consent: bool = False,
        max_files: int = MAX_WORKSPACE_FILES
    ):
        """
        Initialize workspace host.

        Args:
            root: Workspace directory, or None for no workspace
            active_document: File open in the editor
            diagnostics: Diagnostics of the active file
            semantic_consent: Whether source-level scanning is allowed
            max_files: Upper bound on enumerated files
        """
        self._root = Path(root).resolve() if root else None
        self._active_document = active_document
        self._diagnostics = list(diagnostics or [])
        self._semantic_consent = semantic_consent
        self._max_files = max_files

    def workspace_root(self) -> Optional[str]:
        if self._root is None or not self._root.is_dir():
            return None
        return str(self._root)

    def active_document(self) -> Optional[ActiveDocument]:
        return self._active_document

    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def has_semantic_consent(self) -> bool:
        return self._semantic_consent

    async def list_workspace_files(self) -> List[str]:
        root = self.workspace_root()
        if root is None:
            return []
        return await asyncio.to_thread(_walk, Path(root), self._max_files)

    def _resolve(self, relative_path: str) -> Optional[Path]:
        """Resolve a path inside the workspace; None if it escapes the root"""
        if self._root is None:
            return None
        candidate = (self._root / relative_path).resolve()
        if candidate != self._root and self._root not in candidate.parents:
            logger.warning(f"Refusing to read outside workspace: {relative_path}")
            return None
        return candidate

    async def read_file(self, relative_path: str) -> Optional[str]:
        path = self._resolve(relative_path)
        if path is None or not path.is_file():
            return None
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Failed to read {relative_path}: {e}")
            return None
