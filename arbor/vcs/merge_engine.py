"""Arbor merge engine — three-way, path-level classification against the split point.

Merge never creates a commit and never moves a branch pointer.  It produces a
plan of file actions for the working tree:

- changed only on the given branch → take the given version at ``path``;
- changed on both sides → write the given version to ``path + ".conflicted"``
  and leave ``path`` alone (no merge markers; both versions coexist);
- unchanged on the given branch → nothing to do.

"Changed" is decided per side against the split commit: a path is modified
when there is no split point, when the split commit does not track it, or
when the content store reports different bytes.  Only paths present in a
side's head table are considered.

Public API
----------
- :func:`modified_since` — pure classification helper shared with rebase.
- :class:`MergeEngine` — validation + plan construction.
- :class:`MergeResult` / :class:`FileAction` — the plan.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from arbor.vcs.ancestry import AncestryResolver
from arbor.vcs.collaborators import ContentStore
from arbor.vcs.errors import ErrorKind, Outcome
from arbor.vcs.graph import Commit, CommitGraph

logger = logging.getLogger(__name__)

CONFLICT_SUFFIX = ".conflicted"


class FileActionKind(str, enum.Enum):
    TAKE_GIVEN = "take_given"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class FileAction:
    """One working-tree write requested by a merge.

    Attributes:
        kind:        Why the write happens.
        path:        Logical path in the given branch's table.
        target_path: Where the blob is written (``path`` or the conflict copy).
        handle:      Content handle of the given branch's version.
    """

    kind: FileActionKind
    path: str
    target_path: str
    handle: str


@dataclass(frozen=True)
class MergeResult:
    """Outcome of planning ``arbor merge <branch>``.

    Attributes:
        branch:            The branch merged into the current one.
        current_commit_id: Head of the current branch.
        given_commit_id:   Head of *branch*.
        split_commit_id:   Nearest common ancestor, ``None`` for disjoint histories.
        modified_given:    Paths changed on *branch* since the split.
        modified_current:  Paths changed on the current branch since the split.
        actions:           File actions, sorted by path.
    """

    branch: str
    current_commit_id: int
    given_commit_id: int
    split_commit_id: int | None
    modified_given: frozenset[str]
    modified_current: frozenset[str]
    actions: tuple[FileAction, ...]

    @property
    def conflicts(self) -> tuple[str, ...]:
        return tuple(a.path for a in self.actions if a.kind is FileActionKind.CONFLICT)

    @property
    def taken(self) -> tuple[str, ...]:
        return tuple(a.path for a in self.actions if a.kind is FileActionKind.TAKE_GIVEN)


def modified_since(
    file_table: Mapping[str, str],
    split: Commit | None,
    store: ContentStore,
) -> set[str]:
    """Return the paths of *file_table* that differ from the *split* snapshot.

    Every path counts as modified when *split* is ``None``.  Paths deleted
    since the split are not reported; only tracked paths are classified.
    """
    if split is None:
        return set(file_table)
    modified: set[str] = set()
    for path, handle in file_table.items():
        split_handle = split.handle_for(path)
        if split_handle is None or not store.equal(split_handle, handle):
            modified.add(path)
    return modified


class MergeEngine:
    """Plans working-tree-only merges.  Reads the graph, never writes it."""

    def __init__(
        self,
        graph: CommitGraph,
        store: ContentStore,
        *,
        resolver: AncestryResolver | None = None,
        conflict_suffix: str = CONFLICT_SUFFIX,
    ) -> None:
        self.graph = graph
        self.store = store
        self.resolver = resolver or AncestryResolver(graph)
        self.conflict_suffix = conflict_suffix

    def plan(self, branch: str) -> Outcome[MergeResult]:
        """Classify every file touched since the split point and return the action plan."""
        if branch == self.graph.current_branch:
            return Outcome.failure(ErrorKind.CANNOT_MERGE_SELF)
        given = self.graph.branch_head(branch)
        if given is None:
            return Outcome.failure(ErrorKind.BRANCH_NOT_FOUND)

        current = self.graph.head
        split = self.resolver.find_split_point(current.id, given.id)

        modified_given = modified_since(given.file_table, split, self.store)
        modified_current = modified_since(current.file_table, split, self.store)

        actions: list[FileAction] = []
        for path in sorted(given.file_table):
            if path not in modified_given:
                continue
            handle = given.file_table[path]
            if path in modified_current:
                actions.append(
                    FileAction(
                        kind=FileActionKind.CONFLICT,
                        path=path,
                        target_path=path + self.conflict_suffix,
                        handle=handle,
                    )
                )
            else:
                actions.append(
                    FileAction(
                        kind=FileActionKind.TAKE_GIVEN,
                        path=path,
                        target_path=path,
                        handle=handle,
                    )
                )

        result = MergeResult(
            branch=branch,
            current_commit_id=current.id,
            given_commit_id=given.id,
            split_commit_id=None if split is None else split.id,
            modified_given=frozenset(modified_given),
            modified_current=frozenset(modified_current),
            actions=tuple(actions),
        )
        logger.info(
            "✅ Merge plan %r → %r: %d taken, %d conflicted (split=%s)",
            branch,
            self.graph.current_branch,
            len(result.taken),
            len(result.conflicts),
            result.split_commit_id,
        )
        return Outcome.success(result)
