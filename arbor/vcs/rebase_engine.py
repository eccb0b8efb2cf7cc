"""Arbor rebase engine — replay the current branch's own commits onto another branch.

Algorithm
---------
1. Validate: the target branch must exist and differ from the current one.
2. Target head already in the current history → ``ALREADY_UP_TO_DATE``.
3. Current head in the target's history → fast-forward the pointer, no replay.
4. Otherwise find the split commit and build the overlay: paths modified on
   the target since the split (with their handles), minus every path the
   current branch modified since the split.  The current branch always wins.
5. Walk the current branch from its head back to (excluding) the split.
   Each candidate becomes a replay copy: its own file table with the overlay
   applied on top.  The same overlay is applied to every copy; there is no
   per-commit diffing.
6. Move the branch pointer to the target head and add the copies oldest to
   newest, each taking the next id from the graph counter.

Interactive mode
----------------
A :class:`~arbor.vcs.collaborators.DecisionSource` is asked once per
candidate, newest first, for ``CONTINUE``, ``SKIP`` or ``REWORD``.  The first
candidate and any candidate whose parent is the split commit may not be
skipped; a refused skip is logged and the same candidate is offered again.
A reword with a blank message is refused the same way.

Every decision is gathered before the graph is touched, so a decision source
that fails mid-walk leaves the repository exactly as it was.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from arbor.vcs.ancestry import AncestryResolver
from arbor.vcs.collaborators import ContentStore, DecisionSource
from arbor.vcs.errors import CollaboratorError, ErrorKind, Outcome
from arbor.vcs.graph import Commit, CommitGraph
from arbor.vcs.merge_engine import modified_since

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Interactive decisions
# ---------------------------------------------------------------------------


class DecisionKind(str, enum.Enum):
    CONTINUE = "continue"
    SKIP = "skip"
    REWORD = "reword"


@dataclass(frozen=True)
class Decision:
    """What to do with one replay candidate."""

    kind: DecisionKind
    message: str | None = None

    @classmethod
    def proceed(cls) -> Decision:
        return cls(DecisionKind.CONTINUE)

    @classmethod
    def skip(cls) -> Decision:
        return cls(DecisionKind.SKIP)

    @classmethod
    def reword(cls, message: str) -> Decision:
        return cls(DecisionKind.REWORD, message)


class DecisionsExhausted(CollaboratorError):
    """A scripted decision source ran out before the replay walk finished."""


class ScriptedDecisions:
    """DecisionSource that hands out a fixed sequence of decisions in order.

    Used by tests and by non-terminal callers that know their answers up
    front.  The candidates it was asked about are kept in ``asked``.
    """

    def __init__(self, decisions: Iterable[Decision]) -> None:
        self._decisions: Iterator[Decision] = iter(decisions)
        self.asked: list[int] = []

    def next(self, candidate: Commit) -> Decision:
        self.asked.append(candidate.id)
        try:
            return next(self._decisions)
        except StopIteration:
            raise DecisionsExhausted(
                f"No decision left for commit {candidate.id}"
            ) from None


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class RebaseKind(str, enum.Enum):
    FAST_FORWARD = "fast_forward"
    REPLAYED = "replayed"


@dataclass(frozen=True)
class ReplayPlan:
    """A replay copy waiting for its id.

    Attributes:
        source_id:  The original commit being replayed.
        message:    Message for the copy (the original's, or a reworded one).
        file_table: The original's table with the overlay applied.
    """

    source_id: int
    message: str
    file_table: Mapping[str, str]


@dataclass(frozen=True)
class ReplayedCommit:
    """Maps an original commit to its replayed copy."""

    original_id: int
    new_id: int


@dataclass(frozen=True)
class RebaseResult:
    """Outcome of ``arbor rebase <branch>``.

    Attributes:
        kind:             Fast-forward or replay.
        branch:           The rebased (current) branch.
        onto:             The target branch name.
        onto_commit_id:   Head of the target branch at rebase time.
        original_head_id: Head of the current branch before the rebase.
        split_commit_id:  Split point (``None`` for a fast-forward).
        replayed:         Original → copy pairs, oldest first.
        skipped:          Ids of candidates dropped by interactive ``SKIP``.
        overlay:          Target-side changes applied to every copy.
    """

    kind: RebaseKind
    branch: str
    onto: str
    onto_commit_id: int
    original_head_id: int
    split_commit_id: int | None = None
    replayed: tuple[ReplayedCommit, ...] = ()
    skipped: tuple[int, ...] = ()
    overlay: Mapping[str, str] = field(default_factory=dict)

    @property
    def new_head_id(self) -> int:
        return self.replayed[-1].new_id if self.replayed else self.onto_commit_id


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class RebaseEngine:
    """Replays commits unique to the current branch onto another branch's head."""

    def __init__(
        self,
        graph: CommitGraph,
        store: ContentStore,
        *,
        resolver: AncestryResolver | None = None,
    ) -> None:
        self.graph = graph
        self.store = store
        self.resolver = resolver or AncestryResolver(graph)

    def rebase(
        self,
        branch: str,
        decisions: DecisionSource | None = None,
    ) -> Outcome[RebaseResult]:
        """Rebase the current branch onto *branch*.

        ``decisions=None`` replays every candidate; passing a decision source
        runs the interactive protocol.
        """
        graph = self.graph
        target = graph.branch_head(branch)
        if target is None:
            return Outcome.failure(ErrorKind.BRANCH_NOT_FOUND)
        if branch == graph.current_branch:
            return Outcome.failure(ErrorKind.CANNOT_REBASE_ONTO_SELF)

        current = graph.head
        if self.resolver.is_ancestor(target.id, current.id):
            return Outcome.failure(ErrorKind.ALREADY_UP_TO_DATE)

        if self.resolver.is_ancestor(current.id, target.id):
            graph.move_branch(target.id)
            logger.info(
                "✅ Fast-forward %r → %d (%r)", graph.current_branch, target.id, branch
            )
            return Outcome.success(
                RebaseResult(
                    kind=RebaseKind.FAST_FORWARD,
                    branch=graph.current_branch,
                    onto=branch,
                    onto_commit_id=target.id,
                    original_head_id=current.id,
                )
            )

        split = self.resolver.find_split_point(current.id, target.id)
        if split is None:
            return Outcome.failure(ErrorKind.NO_COMMON_ANCESTOR)

        overlay = self.compute_overlay(current, target, split)
        candidates = self.resolver.commits_since(current.id, split)
        if decisions is None:
            plans = [self._plan(c, c.message, overlay) for c in candidates]
            skipped: list[int] = []
        else:
            plans, skipped = self._plan_interactive(candidates, split, overlay, decisions)

        graph.move_branch(target.id)
        replayed: list[ReplayedCommit] = []
        for plan in reversed(plans):
            copy = graph.add_commit(plan.message, plan.file_table)
            replayed.append(ReplayedCommit(original_id=plan.source_id, new_id=copy.id))

        logger.info(
            "✅ Rebased %r onto %r: %d replayed, %d skipped (split=%d)",
            graph.current_branch,
            branch,
            len(replayed),
            len(skipped),
            split.id,
        )
        return Outcome.success(
            RebaseResult(
                kind=RebaseKind.REPLAYED,
                branch=graph.current_branch,
                onto=branch,
                onto_commit_id=target.id,
                original_head_id=current.id,
                split_commit_id=split.id,
                replayed=tuple(replayed),
                skipped=tuple(skipped),
                overlay=dict(overlay),
            )
        )

    def compute_overlay(
        self, current: Commit, target: Commit, split: Commit
    ) -> dict[str, str]:
        """Target-side changes since *split* that the current branch did not also touch."""
        given_modified = {
            path: target.file_table[path]
            for path in modified_since(target.file_table, split, self.store)
        }
        for path in modified_since(current.file_table, split, self.store):
            given_modified.pop(path, None)
        return given_modified

    @staticmethod
    def _plan(candidate: Commit, message: str, overlay: Mapping[str, str]) -> ReplayPlan:
        table = dict(candidate.file_table)
        table.update(overlay)
        return ReplayPlan(source_id=candidate.id, message=message, file_table=table)

    def _plan_interactive(
        self,
        candidates: list[Commit],
        split: Commit,
        overlay: Mapping[str, str],
        decisions: DecisionSource,
    ) -> tuple[list[ReplayPlan], list[int]]:
        plans: list[ReplayPlan] = []
        skipped: list[int] = []
        for position, candidate in enumerate(candidates):
            while True:
                decision = decisions.next(candidate)
                if decision.kind is DecisionKind.SKIP:
                    if position == 0 or candidate.parent_id == split.id:
                        logger.warning(
                            "⚠️ Commit %d cannot be skipped; asking again", candidate.id
                        )
                        continue
                    skipped.append(candidate.id)
                    logger.debug("✅ Skipping commit %d", candidate.id)
                elif decision.kind is DecisionKind.REWORD:
                    message = decision.message or ""
                    if not message.strip():
                        logger.warning(
                            "⚠️ Blank message for commit %d; asking again", candidate.id
                        )
                        continue
                    plans.append(self._plan(candidate, message, overlay))
                else:
                    plans.append(self._plan(candidate, candidate.message, overlay))
                break
        return plans, skipped
