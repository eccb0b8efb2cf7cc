"""Ancestry resolution over the single-parent commit tree.

Equivalent to ``git merge-base A B`` restricted to a tree: collect every
ancestor of the current head into a set, then walk the other head's
lineage nearest-first and return the first commit found in that set.
Because no commit has two parents there is exactly one such commit (or
none, for disjoint histories).
"""
from __future__ import annotations

import logging
from collections.abc import Iterator

from arbor.vcs.graph import Commit, CommitGraph

logger = logging.getLogger(__name__)


class AncestryResolver:
    """Split-point and ancestor queries over a :class:`CommitGraph`."""

    def __init__(self, graph: CommitGraph) -> None:
        self.graph = graph

    def lineage(self, commit_id: int) -> Iterator[Commit]:
        """Yield *commit_id* and its ancestors, nearest first.  Unknown ids yield nothing."""
        return self.graph.history(commit_id) if commit_id in self.graph.commits else iter(())

    def find_split_point(self, current_id: int, other_id: int) -> Commit | None:
        """Return the nearest common ancestor of the two commits, or ``None``.

        Nearest is measured along *other_id*'s chain.  ``None`` means the
        two heads share no history; callers treat it as "no shared base".
        """
        current_ancestors = {c.id for c in self.lineage(current_id)}
        for commit in self.lineage(other_id):
            if commit.id in current_ancestors:
                logger.debug(
                    "✅ Split point %d (between %d and %d)", commit.id, current_id, other_id
                )
                return commit
        logger.debug("⚠️ No common ancestor between %d and %d", current_id, other_id)
        return None

    def is_ancestor(self, candidate_id: int, head_id: int) -> bool:
        """Return ``True`` if *candidate_id* is *head_id* or one of its ancestors."""
        return any(c.id == candidate_id for c in self.lineage(head_id))

    def commits_since(self, head_id: int, split: Commit | None) -> list[Commit]:
        """Commits from *head_id* back to, but excluding, *split*, newest first."""
        collected: list[Commit] = []
        for commit in self.lineage(head_id):
            if split is not None and commit.id == split.id:
                break
            collected.append(commit)
        return collected
