"""Commit graph — the in-memory arena of commits, branch references and staging sets.

Commits live in a flat ``{id: Commit}`` arena and refer to their parent by
id, so the graph is a plain mapping that serialises without a graph walk.
Every commit has at most one parent: histories fork but never re-join.

Ids are integers assigned from a monotonic counter.  The root commit created
by :meth:`CommitGraph.initialize` is id 0; every later commit (including
rebase replays) takes ``id_counter + 1``.  Creation order is therefore the
total order used for tie-breaking everywhere else.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType

from arbor.vcs.errors import ErrorKind, Outcome

logger = logging.getLogger(__name__)

ROOT_COMMIT_ID = 0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Commit:
    """An immutable snapshot record.

    Attributes:
        id:         Globally unique, strictly increasing in creation order.
        message:    Commit message.
        timestamp:  Creation time (UTC), set once.
        parent_id:  Id of the single parent, or ``None`` for the root.
        file_table: Read-only ``{path: handle}`` mapping.  Handles are owned
                    by the content store and never interpreted here.
    """

    id: int
    message: str
    timestamp: datetime
    parent_id: int | None
    file_table: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "file_table", MappingProxyType(dict(self.file_table)))

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def handle_for(self, path: str) -> str | None:
        return self.file_table.get(path)

    def __repr__(self) -> str:
        return (
            f"<Commit {self.id} parent={self.parent_id}"
            f" files={len(self.file_table)} msg={self.message[:30]!r}>"
        )


@dataclass(frozen=True)
class BranchStatus:
    name: str
    is_current: bool


@dataclass(frozen=True)
class StatusReport:
    """Snapshot of branch and staging state for ``arbor status``."""

    branches: tuple[BranchStatus, ...]
    staged: tuple[str, ...]
    marked_for_removal: tuple[str, ...]


@dataclass
class CommitGraph:
    """All commits ever created, branch heads, the active branch and staging sets.

    Construct an empty repository with :meth:`initialize`.  The persistence
    layer rebuilds instances directly from stored rows.

    Attributes:
        commits:            ``{id: Commit}`` — history is never deleted.
        branches:           ``{branch_name: head_commit_id}``.
        current_branch:     Name of the active branch (a key of ``branches``).
        head_id:            Commit the active branch points to.
        staged:             Paths queued for the next commit.
        marked_for_removal: Paths queued for deletion in the next commit.
        id_counter:         The most recently assigned commit id.
    """

    commits: dict[int, Commit]
    branches: dict[str, int]
    current_branch: str
    head_id: int
    staged: set[str] = field(default_factory=set)
    marked_for_removal: set[str] = field(default_factory=set)
    id_counter: int = ROOT_COMMIT_ID

    @classmethod
    def initialize(
        cls,
        *,
        branch: str = "master",
        message: str = "initial commit",
        timestamp: datetime | None = None,
    ) -> CommitGraph:
        """Return a graph holding only the root commit, with *branch* checked out."""
        root = Commit(
            id=ROOT_COMMIT_ID,
            message=message,
            timestamp=timestamp or _utc_now(),
            parent_id=None,
            file_table={},
        )
        logger.debug("✅ Initialised commit graph on branch %r", branch)
        return cls(
            commits={root.id: root},
            branches={branch: root.id},
            current_branch=branch,
            head_id=root.id,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def head(self) -> Commit:
        return self.commits[self.head_id]

    def get(self, commit_id: int) -> Commit | None:
        return self.commits.get(commit_id)

    def branch_head(self, name: str) -> Commit | None:
        commit_id = self.branches.get(name)
        return None if commit_id is None else self.commits.get(commit_id)

    def history(self, commit_id: int | None = None) -> Iterator[Commit]:
        """Yield commits from *commit_id* (default: head) back to the root, newest first."""
        cursor = self.commits.get(self.head_id if commit_id is None else commit_id)
        while cursor is not None:
            yield cursor
            cursor = None if cursor.parent_id is None else self.commits.get(cursor.parent_id)

    def all_commits(self) -> list[Commit]:
        """Every commit in the arena, ascending id."""
        return [self.commits[cid] for cid in sorted(self.commits)]

    def find_by_message(self, message: str) -> list[int]:
        """Return the ids of all commits whose message equals *message* exactly."""
        return sorted(cid for cid, c in self.commits.items() if c.message == message)

    def status(self) -> StatusReport:
        return StatusReport(
            branches=tuple(
                BranchStatus(name=name, is_current=name == self.current_branch)
                for name in sorted(self.branches)
            ),
            staged=tuple(sorted(self.staged)),
            marked_for_removal=tuple(sorted(self.marked_for_removal)),
        )

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def add_commit(
        self,
        message: str,
        file_table: Mapping[str, str],
        *,
        timestamp: datetime | None = None,
    ) -> Commit:
        """Create a commit as the child of the current head and advance the branch to it.

        The id is taken from the counter, which is incremented first.
        """
        self.id_counter += 1
        commit = Commit(
            id=self.id_counter,
            message=message,
            timestamp=timestamp or _utc_now(),
            parent_id=self.head_id,
            file_table=file_table,
        )
        self.commits[commit.id] = commit
        self.head_id = commit.id
        self.branches[self.current_branch] = commit.id
        logger.debug(
            "✅ Commit %d on %r (parent %d, %d files)",
            commit.id,
            self.current_branch,
            commit.parent_id,
            len(commit.file_table),
        )
        return commit

    def create_branch(self, name: str) -> Outcome[int]:
        """Bind *name* to the current head.  No commit is created."""
        if name in self.branches:
            return Outcome.failure(ErrorKind.BRANCH_ALREADY_EXISTS)
        self.branches[name] = self.head_id
        logger.debug("✅ Branch %r created at commit %d", name, self.head_id)
        return Outcome.success(self.head_id)

    def switch_branch(self, name: str) -> Outcome[int]:
        """Make *name* the current branch, recording the old head under the old name."""
        if name not in self.branches:
            return Outcome.failure(ErrorKind.BRANCH_NOT_FOUND)
        self.branches[self.current_branch] = self.head_id
        self.current_branch = name
        self.head_id = self.branches[name]
        logger.debug("✅ Switched to %r at commit %d", name, self.head_id)
        return Outcome.success(self.head_id)

    def remove_branch(self, name: str) -> Outcome[int]:
        """Delete the *name* reference.  Its commits stay in the arena."""
        if name == self.current_branch:
            return Outcome.failure(ErrorKind.CANNOT_REMOVE_CURRENT_BRANCH)
        if name not in self.branches:
            return Outcome.failure(ErrorKind.BRANCH_NOT_FOUND)
        commit_id = self.branches.pop(name)
        logger.debug("✅ Branch %r removed (was at %d)", name, commit_id)
        return Outcome.success(commit_id)

    def reset_pointer(self, commit_id: int) -> Outcome[Commit]:
        """Force the current branch head onto any existing commit."""
        commit = self.commits.get(commit_id)
        if commit is None:
            return Outcome.failure(ErrorKind.COMMIT_NOT_FOUND)
        self.head_id = commit.id
        self.branches[self.current_branch] = commit.id
        return Outcome.success(commit)

    def move_branch(self, commit_id: int) -> None:
        """Point the current branch at *commit_id* (used by fast-forward and replay)."""
        self.head_id = commit_id
        self.branches[self.current_branch] = commit_id

    def stage_file(self, path: str) -> None:
        self.staged.add(path)

    def unstage_file(self, path: str) -> None:
        self.staged.discard(path)

    def mark_removal(self, path: str) -> None:
        self.marked_for_removal.add(path)

    def unmark_removal(self, path: str) -> None:
        self.marked_for_removal.discard(path)

    def clear_staging(self) -> None:
        self.staged.clear()
        self.marked_for_removal.clear()
