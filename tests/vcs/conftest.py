"""In-memory collaborators for core tests: no filesystem, no database."""
from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from arbor.vcs.graph import Commit, CommitGraph
from arbor.vcs.repository import Repository


class MemoryContentStore:
    """ContentStore keeping blobs in a dict under sequential handles."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self._ids = itertools.count(1)

    def store(self, path: str, data: bytes) -> str:
        handle = f"h{next(self._ids)}"
        self.blobs[handle] = data
        return handle

    def read(self, handle: str) -> bytes:
        return self.blobs[handle]

    def equal(self, handle_a: str, handle_b: str) -> bool:
        return self.blobs[handle_a] == self.blobs[handle_b]

    def text(self, commit: Commit) -> dict[str, str]:
        """Decode a commit's file table to ``{path: text}``."""
        return {path: self.blobs[h].decode() for path, h in commit.file_table.items()}


class MemoryWorkingTree:
    """WorkingTree backed by a ``{path: bytes}`` dict."""

    def __init__(self, store: MemoryContentStore) -> None:
        self.store = store
        self.files: dict[str, bytes] = {}

    def write(self, path: str, handle: str) -> None:
        self.files[path] = self.store.read(handle)

    def delete(self, path: str) -> None:
        self.files.pop(path, None)

    def read(self, path: str) -> bytes | None:
        return self.files.get(path)


_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def store() -> MemoryContentStore:
    return MemoryContentStore()


@pytest.fixture
def tree(store: MemoryContentStore) -> MemoryWorkingTree:
    return MemoryWorkingTree(store)


@pytest.fixture
def graph() -> CommitGraph:
    return CommitGraph.initialize(timestamp=_EPOCH)


@pytest.fixture
def repo(graph: CommitGraph, store: MemoryContentStore, tree: MemoryWorkingTree) -> Repository:
    return Repository(graph, store, tree)


@pytest.fixture
def commit_files(
    graph: CommitGraph, store: MemoryContentStore
) -> Callable[[str, dict[str, str]], Commit]:
    """Return a helper that commits ``{path: text}`` directly on the current branch."""

    def _commit(message: str, files: dict[str, str]) -> Commit:
        table = {path: store.store(path, text.encode()) for path, text in files.items()}
        return graph.add_commit(
            message, table, timestamp=_EPOCH + timedelta(minutes=graph.id_counter + 1)
        )

    return _commit


@pytest.fixture
def disjoint_graph(store: MemoryContentStore) -> CommitGraph:
    """Two unrelated histories: master 0 ─ 1 and other 2 ─ 3.  master checked out."""

    def _make(commit_id: int, parent_id: int | None, files: dict[str, str]) -> Commit:
        return Commit(
            id=commit_id,
            message=f"c{commit_id}",
            timestamp=_EPOCH + timedelta(minutes=commit_id),
            parent_id=parent_id,
            file_table={p: store.store(p, text.encode()) for p, text in files.items()},
        )

    commits = [
        _make(0, None, {}),
        _make(1, 0, {"f": "mine"}),
        _make(2, None, {}),
        _make(3, 2, {"f": "theirs", "g": "x"}),
    ]
    return CommitGraph(
        commits={c.id: c for c in commits},
        branches={"master": 1, "other": 3},
        current_branch="master",
        head_id=1,
        id_counter=3,
    )
