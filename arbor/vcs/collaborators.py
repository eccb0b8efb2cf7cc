"""Capabilities the core consumes but does not implement.

The engines only ever see these protocols.  Filesystem implementations live
in :mod:`arbor.cli.object_store` and :mod:`arbor.cli.working_tree`;
persistence lives in :mod:`arbor.cli.db`.  Interactive-rebase decision
sources live in :mod:`arbor.vcs.rebase_engine` (scripted) and
:mod:`arbor.cli.commands.rebase` (terminal prompt).
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from arbor.vcs.graph import Commit, CommitGraph
    from arbor.vcs.rebase_engine import Decision


class ContentStore(Protocol):
    """Owner of file bytes.  Handles are opaque to the core."""

    def store(self, path: str, data: bytes) -> str:
        """Persist *data* (the content of *path*) and return its handle."""
        ...

    def read(self, handle: str) -> bytes: ...

    def equal(self, handle_a: str, handle_b: str) -> bool:
        """Byte-exact comparison of two stored blobs."""
        ...


class WorkingTree(Protocol):
    """The user's checked-out files, addressed by repository-relative path."""

    def write(self, path: str, handle: str) -> None:
        """Overwrite *path* with the blob behind *handle*."""
        ...

    def delete(self, path: str) -> None: ...

    def read(self, path: str) -> bytes | None:
        """Current bytes of *path*, or ``None`` when the file does not exist."""
        ...


class DecisionSource(Protocol):
    """Supplies one interactive-rebase decision per replay candidate."""

    def next(self, candidate: Commit) -> Decision: ...


class PersistenceStore(Protocol):
    """Loads and saves a whole :class:`CommitGraph`.

    Async because the shipped implementation sits on an async DB driver;
    the core itself never awaits anything.
    """

    async def load(self) -> CommitGraph | None: ...

    async def save(self, graph: CommitGraph) -> None: ...
