"""Tests for rebase: validation, fast-forward, replay and interactive decisions.

Verifies:
- test_rebase_replays_onto_target                    — R/A/B + feature C → B' (id 4) = {f:2, g:x}
- test_rebase_replay_count_and_ids                   — one copy per commit since the split, ids ascend oldest first
- test_rebase_overlay_applied_to_every_copy          — the same target-side overlay lands in each copy
- test_rebase_current_branch_wins_on_overlap         — paths changed on both sides keep the current version
- test_rebase_fast_forward                           — current head behind target → pointer move, no commits
- test_rebase_already_up_to_date                     — target already in history → failure kind, nothing changes
- test_rebase_validation_order                       — unknown branch, then self
- test_interactive_skip_and_reword                   — middle commit skipped, oldest reworded
- test_interactive_refused_skip_asks_again           — first candidate cannot be skipped
- test_interactive_exhausted_source_leaves_graph     — decision source failure before any mutation
- test_rebase_disjoint_histories_has_no_common_ancestor — unrelated roots → failure kind, nothing changes
- test_interactive_blank_reword_asks_again           — a blank new message is refused like a skip
- test_repository_rebase_syncs_working_tree          — new head files written to the tree
"""
from __future__ import annotations

from collections.abc import Callable

import pytest

from arbor.vcs.errors import ErrorKind
from arbor.vcs.graph import Commit, CommitGraph
from arbor.vcs.rebase_engine import (
    Decision,
    DecisionsExhausted,
    RebaseEngine,
    RebaseKind,
    ScriptedDecisions,
)
from arbor.vcs.repository import Repository

CommitFiles = Callable[[str, dict[str, str]], Commit]


@pytest.fixture
def three_ahead(graph: CommitGraph, commit_files: CommitFiles) -> CommitGraph:
    """master: A(1) ─ B1(2) ─ B2(3) ─ B3(4);  feature: A ─ C(5).  master checked out."""
    commit_files("A", {"f": "1"})
    graph.create_branch("feature")
    commit_files("B1", {"f": "2"})
    commit_files("B2", {"f": "2", "k": "k"})
    commit_files("B3", {"f": "3", "k": "k"})
    graph.switch_branch("feature")
    commit_files("C", {"f": "1", "g": "x"})
    graph.switch_branch("master")
    return graph


def test_rebase_replays_onto_target(graph: CommitGraph, store, commit_files: CommitFiles) -> None:
    a = commit_files("A", {"f": "1"})
    graph.create_branch("feature")
    b = commit_files("B", {"f": "2"})
    graph.switch_branch("feature")
    c = commit_files("C", {"f": "1", "g": "x"})
    graph.switch_branch("master")

    result = RebaseEngine(graph, store).rebase("feature").unwrap()

    assert result.kind is RebaseKind.REPLAYED
    assert result.split_commit_id == a.id
    assert set(result.overlay) == {"g"}
    new_head = graph.head
    assert new_head.id == 4
    assert new_head.parent_id == c.id
    assert new_head.message == b.message
    assert store.text(new_head) == {"f": "2", "g": "x"}
    assert graph.branches["master"] == 4
    assert graph.branches["feature"] == c.id
    assert graph.get(b.id) is b


def test_rebase_replay_count_and_ids(three_ahead: CommitGraph, store) -> None:
    counter_before = three_ahead.id_counter
    result = RebaseEngine(three_ahead, store).rebase("feature").unwrap()

    assert [(p.original_id, p.new_id) for p in result.replayed] == [(2, 6), (3, 7), (4, 8)]
    assert all(p.new_id > counter_before for p in result.replayed)
    assert [c.id for c in three_ahead.history()] == [8, 7, 6, 5, 1, 0]
    assert result.new_head_id == 8


def test_rebase_overlay_applied_to_every_copy(three_ahead: CommitGraph, store) -> None:
    RebaseEngine(three_ahead, store).rebase("feature")
    for commit_id in (6, 7, 8):
        assert store.text(three_ahead.get(commit_id))["g"] == "x"
    assert store.text(three_ahead.get(6)) == {"f": "2", "g": "x"}
    assert store.text(three_ahead.get(8)) == {"f": "3", "k": "k", "g": "x"}


def test_rebase_current_branch_wins_on_overlap(graph: CommitGraph, store, commit_files: CommitFiles) -> None:
    commit_files("A", {"f": "1"})
    graph.create_branch("feature")
    commit_files("mine", {"f": "mine"})
    graph.switch_branch("feature")
    commit_files("theirs", {"f": "theirs"})
    graph.switch_branch("master")

    result = RebaseEngine(graph, store).rebase("feature").unwrap()

    assert dict(result.overlay) == {}
    assert store.text(graph.head) == {"f": "mine"}


def test_rebase_fast_forward(graph: CommitGraph, store, commit_files: CommitFiles) -> None:
    commit_files("A", {"f": "1"})
    graph.create_branch("feature")
    graph.switch_branch("feature")
    c = commit_files("C", {"f": "2"})
    graph.switch_branch("master")
    commits_before = len(graph.commits)

    result = RebaseEngine(graph, store).rebase("feature").unwrap()

    assert result.kind is RebaseKind.FAST_FORWARD
    assert result.replayed == ()
    assert result.new_head_id == c.id
    assert graph.branches["master"] == c.id
    assert graph.head_id == c.id
    assert len(graph.commits) == commits_before


def test_rebase_already_up_to_date(graph: CommitGraph, store, commit_files: CommitFiles) -> None:
    commit_files("A", {"f": "1"})
    graph.create_branch("feature")
    b = commit_files("B", {"f": "2"})

    outcome = RebaseEngine(graph, store).rebase("feature")

    assert outcome.error is ErrorKind.ALREADY_UP_TO_DATE
    assert outcome.detail == "Already up-to-date."
    assert graph.head_id == b.id
    assert graph.id_counter == b.id


def test_rebase_validation_order(graph: CommitGraph, store) -> None:
    engine = RebaseEngine(graph, store)
    assert engine.rebase("ghost").error is ErrorKind.BRANCH_NOT_FOUND
    assert engine.rebase("master").error is ErrorKind.CANNOT_REBASE_ONTO_SELF


def test_interactive_skip_and_reword(three_ahead: CommitGraph, store) -> None:
    decisions = ScriptedDecisions(
        [Decision.proceed(), Decision.skip(), Decision.reword("B1 reworded")]
    )

    result = RebaseEngine(three_ahead, store).rebase("feature", decisions).unwrap()

    assert decisions.asked == [4, 3, 2]
    assert result.skipped == (3,)
    assert [(p.original_id, p.new_id) for p in result.replayed] == [(2, 6), (4, 7)]
    assert three_ahead.get(6).message == "B1 reworded"
    assert three_ahead.get(7).message == "B3"
    assert three_ahead.get(7).parent_id == 6


def test_interactive_refused_skip_asks_again(three_ahead: CommitGraph, store) -> None:
    decisions = ScriptedDecisions(
        [Decision.skip(), Decision.proceed(), Decision.proceed(), Decision.skip(), Decision.proceed()]
    )

    result = RebaseEngine(three_ahead, store).rebase("feature", decisions).unwrap()

    # B3 is first and B1 sits on the split point: both skips are refused.
    assert decisions.asked == [4, 4, 3, 2, 2]
    assert result.skipped == ()
    assert len(result.replayed) == 3


def test_interactive_exhausted_source_leaves_graph(three_ahead: CommitGraph, store) -> None:
    head_before = three_ahead.head_id
    counter_before = three_ahead.id_counter

    with pytest.raises(DecisionsExhausted):
        RebaseEngine(three_ahead, store).rebase("feature", ScriptedDecisions([Decision.proceed()]))

    assert three_ahead.head_id == head_before
    assert three_ahead.id_counter == counter_before
    assert three_ahead.branches["master"] == head_before


def test_repository_rebase_syncs_working_tree(three_ahead: CommitGraph, repo: Repository, tree) -> None:
    repo.rebase("feature").unwrap()
    assert tree.files == {"f": b"3", "k": b"k", "g": b"x"}


def test_rebase_disjoint_histories_has_no_common_ancestor(disjoint_graph: CommitGraph, store) -> None:
    outcome = RebaseEngine(disjoint_graph, store).rebase("other")

    assert outcome.error is ErrorKind.NO_COMMON_ANCESTOR
    assert disjoint_graph.head_id == 1
    assert disjoint_graph.id_counter == 3
    assert disjoint_graph.branches == {"master": 1, "other": 3}


def test_interactive_blank_reword_asks_again(three_ahead: CommitGraph, store) -> None:
    decisions = ScriptedDecisions(
        [
            Decision.skip(),
            Decision.reword("   "),
            Decision.reword("B3 renamed"),
            Decision.proceed(),
            Decision.reword(""),
            Decision.proceed(),
        ]
    )

    RebaseEngine(three_ahead, store).rebase("feature", decisions).unwrap()

    assert decisions.asked == [4, 4, 4, 3, 2, 2]
    assert [three_ahead.get(i).message for i in (6, 7, 8)] == ["B1", "B2", "B3 renamed"]
