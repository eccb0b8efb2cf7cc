"""Filesystem blob store for Arbor repositories.

Every ``arbor commit`` copies the bytes of each staged file into
``<repo_root>/.arbor/objects/`` under a fresh random handle::

    .arbor/objects/<h2>/<h30>

where ``<h2>`` is the first two hex characters of the handle and ``<h30>``
the remaining thirty.  Handles are ``uuid4`` hex strings, not content
digests: the store does not deduplicate, and two commits of identical bytes
produce two blobs.  Equality is answered by comparing bytes.

The store is append-only.  Nothing in Arbor deletes an object.
"""
from __future__ import annotations

import logging
import pathlib
import uuid

from arbor.vcs.errors import CollaboratorError

logger = logging.getLogger(__name__)

_OBJECTS_DIR = "objects"


def objects_dir(repo_root: pathlib.Path) -> pathlib.Path:
    """Return the path to the local object store root directory.

    Shard subdirectories are created lazily by :meth:`FileContentStore.store`.
    """
    return repo_root / ".arbor" / _OBJECTS_DIR


def object_path(repo_root: pathlib.Path, handle: str) -> pathlib.Path:
    """Return the on-disk path for *handle* (may not yet exist)."""
    return objects_dir(repo_root) / handle[:2] / handle[2:]


class FileContentStore:
    """:class:`~arbor.vcs.collaborators.ContentStore` backed by ``.arbor/objects/``."""

    def __init__(self, repo_root: pathlib.Path) -> None:
        self.repo_root = repo_root

    def store(self, path: str, data: bytes) -> str:
        handle = uuid.uuid4().hex
        dest = object_path(self.repo_root, handle)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(data)
        except OSError as exc:
            raise CollaboratorError(f"Cannot store '{path}': {exc}") from exc
        logger.debug("✅ Stored '%s' as %s (%d bytes)", path, handle[:8], len(data))
        return handle

    def has(self, handle: str) -> bool:
        return object_path(self.repo_root, handle).is_file()

    def read(self, handle: str) -> bytes:
        src = object_path(self.repo_root, handle)
        try:
            return src.read_bytes()
        except OSError as exc:
            raise CollaboratorError(
                f"Object {handle[:8]} not found in local store: {exc}"
            ) from exc

    def equal(self, handle_a: str, handle_b: str) -> bool:
        if handle_a == handle_b:
            return True
        return self.read(handle_a) == self.read(handle_b)
