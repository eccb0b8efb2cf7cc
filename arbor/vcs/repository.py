"""Repository facade — the operations a calling shell invokes.

Binds a :class:`CommitGraph` to its content store and working tree and
exposes one method per user-level command (stage, remove, commit, checkout,
branch, reset, merge, rebase, and the read-only queries).  Every method
returns an :class:`~arbor.vcs.errors.Outcome`; preconditions are checked
before the graph or the working tree is touched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from arbor.vcs.ancestry import AncestryResolver
from arbor.vcs.collaborators import ContentStore, DecisionSource, WorkingTree
from arbor.vcs.errors import ErrorKind, Outcome
from arbor.vcs.graph import Commit, CommitGraph, StatusReport
from arbor.vcs.merge_engine import CONFLICT_SUFFIX, MergeEngine, MergeResult
from arbor.vcs.rebase_engine import RebaseEngine, RebaseResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    """What ``checkout`` did.

    Attributes:
        branch:         Branch checked out, or ``None`` for a file checkout.
        commit_id:      Commit the files were taken from.
        written:        Paths written into the working tree.
        deleted:        Paths removed from the working tree.
        already_current: ``True`` when the branch was already checked out.
    """

    branch: str | None
    commit_id: int
    written: tuple[str, ...] = ()
    deleted: tuple[str, ...] = ()
    already_current: bool = False


class Repository:
    """A commit graph plus the collaborators needed to act on user files."""

    def __init__(
        self,
        graph: CommitGraph,
        store: ContentStore,
        tree: WorkingTree,
        *,
        conflict_suffix: str = CONFLICT_SUFFIX,
    ) -> None:
        self.graph = graph
        self.store = store
        self.tree = tree
        self.resolver = AncestryResolver(graph)
        self.merger = MergeEngine(
            graph, store, resolver=self.resolver, conflict_suffix=conflict_suffix
        )
        self.rebaser = RebaseEngine(graph, store, resolver=self.resolver)

    # ------------------------------------------------------------------
    # Staging and committing
    # ------------------------------------------------------------------

    def add(self, path: str) -> Outcome[str]:
        """Stage *path* unless it is missing or identical to the head's version."""
        data = self.tree.read(path)
        if data is None:
            return Outcome.failure(ErrorKind.FILE_NOT_FOUND)
        handle = self.graph.head.handle_for(path)
        if handle is not None and self.store.read(handle) == data:
            return Outcome.failure(ErrorKind.FILE_UNCHANGED)
        self.graph.stage_file(path)
        self.graph.unmark_removal(path)
        return Outcome.success(path)

    def remove(self, path: str) -> Outcome[str]:
        """Mark *path* for removal from the next commit."""
        if path not in self.graph.staged and path not in self.graph.head.file_table:
            return Outcome.failure(ErrorKind.NO_REASON_TO_REMOVE)
        self.graph.unstage_file(path)
        self.graph.mark_removal(path)
        return Outcome.success(path)

    def commit(self, message: str) -> Outcome[Commit]:
        """Record staged files as a new commit on the current branch.

        The new table inherits the head's table minus staged and removed
        paths, then stores each staged file through the content store.
        """
        if not message.strip():
            return Outcome.failure(ErrorKind.EMPTY_COMMIT_MESSAGE)
        graph = self.graph
        if not graph.staged:
            graph.clear_staging()
            return Outcome.failure(ErrorKind.NOTHING_TO_COMMIT)

        table = {
            path: handle
            for path, handle in graph.head.file_table.items()
            if path not in graph.staged and path not in graph.marked_for_removal
        }
        contents: dict[str, bytes] = {}
        for path in sorted(graph.staged):
            data = self.tree.read(path)
            if data is None:
                return Outcome.failure(
                    ErrorKind.FILE_NOT_FOUND, f"Staged file '{path}' no longer exists."
                )
            contents[path] = data
        for path, data in contents.items():
            table[path] = self.store.store(path, data)

        commit = graph.add_commit(message, table)
        graph.clear_staging()
        logger.info("✅ Committed %d on %r", commit.id, graph.current_branch)
        return Outcome.success(commit)

    # ------------------------------------------------------------------
    # Checkout and reset
    # ------------------------------------------------------------------

    def checkout(self, name: str) -> Outcome[CheckoutResult]:
        """Check out branch *name*, or else file *name* from the head commit."""
        if name in self.graph.branches:
            return self.checkout_branch(name)
        if name in self.graph.head.file_table:
            return self.checkout_file(self.graph.head_id, name)
        return Outcome.failure(
            ErrorKind.FILE_NOT_FOUND_IN_COMMIT,
            "File does not exist in the most recent commit, or no such branch exists.",
        )

    def checkout_file(self, commit_id: int, path: str) -> Outcome[CheckoutResult]:
        """Restore *path* in the working tree to its version in *commit_id*."""
        commit = self.graph.get(commit_id)
        if commit is None:
            return Outcome.failure(ErrorKind.COMMIT_NOT_FOUND)
        handle = commit.handle_for(path)
        if handle is None:
            return Outcome.failure(ErrorKind.FILE_NOT_FOUND_IN_COMMIT)
        self.tree.write(path, handle)
        return Outcome.success(
            CheckoutResult(branch=None, commit_id=commit.id, written=(path,))
        )

    def checkout_branch(self, name: str) -> Outcome[CheckoutResult]:
        """Switch to *name* and make the working tree match its head."""
        if name not in self.graph.branches:
            return Outcome.failure(ErrorKind.BRANCH_NOT_FOUND)
        if name == self.graph.current_branch:
            return Outcome.success(
                CheckoutResult(branch=name, commit_id=self.graph.head_id, already_current=True)
            )
        previous = self.graph.head
        self.graph.switch_branch(name)
        written, deleted = self._sync_tree(previous, self.graph.head)
        return Outcome.success(
            CheckoutResult(
                branch=name, commit_id=self.graph.head_id, written=written, deleted=deleted
            )
        )

    def reset(self, commit_id: int) -> Outcome[CheckoutResult]:
        """Restore the working tree to *commit_id* and move the current branch there."""
        target = self.graph.get(commit_id)
        if target is None:
            return Outcome.failure(ErrorKind.COMMIT_NOT_FOUND)
        previous = self.graph.head
        written, deleted = self._sync_tree(previous, target)
        self.graph.reset_pointer(target.id)
        logger.info("✅ Reset %r to %d", self.graph.current_branch, target.id)
        return Outcome.success(
            CheckoutResult(
                branch=self.graph.current_branch,
                commit_id=target.id,
                written=written,
                deleted=deleted,
            )
        )

    def _sync_tree(self, previous: Commit, target: Commit) -> tuple[tuple[str, ...], tuple[str, ...]]:
        written = tuple(sorted(target.file_table))
        for path in written:
            self.tree.write(path, target.file_table[path])
        deleted = tuple(sorted(set(previous.file_table) - set(target.file_table)))
        for path in deleted:
            self.tree.delete(path)
        return written, deleted

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def create_branch(self, name: str) -> Outcome[int]:
        return self.graph.create_branch(name)

    def remove_branch(self, name: str) -> Outcome[int]:
        return self.graph.remove_branch(name)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def merge(self, branch: str) -> Outcome[MergeResult]:
        """Plan a merge of *branch* and write the resulting files into the working tree."""
        outcome = self.merger.plan(branch)
        if outcome.value is None:
            return outcome
        for action in outcome.value.actions:
            self.tree.write(action.target_path, action.handle)
        return outcome

    def rebase(
        self, branch: str, decisions: DecisionSource | None = None
    ) -> Outcome[RebaseResult]:
        """Rebase onto *branch*, then write every file of the new head into the working tree."""
        outcome = self.rebaser.rebase(branch, decisions)
        if outcome.value is None:
            return outcome
        head = self.graph.head
        for path in sorted(head.file_table):
            self.tree.write(path, head.file_table[path])
        return outcome

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def log(self) -> Outcome[list[Commit]]:
        return Outcome.success(list(self.graph.history()))

    def global_log(self) -> Outcome[list[Commit]]:
        return Outcome.success(self.graph.all_commits())

    def find(self, message: str) -> Outcome[list[int]]:
        ids = self.graph.find_by_message(message)
        if not ids:
            return Outcome.failure(
                ErrorKind.COMMIT_NOT_FOUND, "Found no commit with that message."
            )
        return Outcome.success(ids)

    def status(self) -> Outcome[StatusReport]:
        return Outcome.success(self.graph.status())
