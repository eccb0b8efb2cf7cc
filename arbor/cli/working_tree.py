"""Filesystem working tree: the repository directory minus ``.arbor/``.

Paths are POSIX strings relative to the repository root.  Anything that
would land outside the root, or inside ``.arbor/``, is rejected.
"""
from __future__ import annotations

import logging
import pathlib

from arbor.vcs.collaborators import ContentStore
from arbor.vcs.errors import CollaboratorError, InvalidPathError

logger = logging.getLogger(__name__)

_ARBOR_DIR = ".arbor"


class FileWorkingTree:
    """:class:`~arbor.vcs.collaborators.WorkingTree` rooted at the repository directory."""

    def __init__(self, repo_root: pathlib.Path, store: ContentStore) -> None:
        self.repo_root = repo_root.resolve()
        self.store = store

    def resolve(self, path: str) -> pathlib.Path:
        """Return the absolute path for *path*, refusing escapes and ``.arbor/``."""
        target = (self.repo_root / path).resolve()
        try:
            rel = target.relative_to(self.repo_root)
        except ValueError:
            raise InvalidPathError(f"Path '{path}' is outside the repository.") from None
        if not rel.parts or rel.parts[0] == _ARBOR_DIR:
            raise InvalidPathError(f"Path '{path}' is not a working-tree file.")
        return target

    def read(self, path: str) -> bytes | None:
        target = self.resolve(path)
        if not target.is_file():
            return None
        try:
            return target.read_bytes()
        except OSError as exc:
            raise CollaboratorError(f"Cannot read '{path}': {exc}") from exc

    def write(self, path: str, handle: str) -> None:
        target = self.resolve(path)
        data = self.store.read(handle)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise CollaboratorError(f"Cannot write '{path}': {exc}") from exc
        logger.debug("✅ Wrote '%s' from %s", path, handle[:8])

    def delete(self, path: str) -> None:
        target = self.resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise CollaboratorError(f"Cannot delete '{path}': {exc}") from exc
        logger.debug("✅ Deleted '%s'", path)
