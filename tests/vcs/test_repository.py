"""Tests for the Repository facade: staging, commit, checkout, reset and queries."""
from __future__ import annotations

from arbor.vcs.errors import ErrorKind
from arbor.vcs.graph import CommitGraph
from arbor.vcs.repository import Repository


def _commit(repo: Repository, tree, message: str, **files: bytes) -> None:
    for path, data in files.items():
        tree.files[path] = data
        assert repo.add(path).ok
    repo.commit(message).unwrap()


# ---------------------------------------------------------------------------
# add / rm
# ---------------------------------------------------------------------------


def test_add_missing_file(repo: Repository) -> None:
    assert repo.add("nope.txt").error is ErrorKind.FILE_NOT_FOUND


def test_add_unchanged_file_is_rejected(repo: Repository, tree, graph: CommitGraph) -> None:
    _commit(repo, tree, "one", a=b"1")
    outcome = repo.add("a")
    assert outcome.error is ErrorKind.FILE_UNCHANGED
    assert graph.staged == set()


def test_add_clears_removal_mark(repo: Repository, tree, graph: CommitGraph) -> None:
    _commit(repo, tree, "one", a=b"1")
    repo.remove("a")
    tree.files["a"] = b"2"
    repo.add("a")
    assert graph.staged == {"a"}
    assert graph.marked_for_removal == set()


def test_remove_untracked_unstaged_file(repo: Repository) -> None:
    assert repo.remove("ghost").error is ErrorKind.NO_REASON_TO_REMOVE


def test_remove_staged_file_unstages_it(repo: Repository, tree, graph: CommitGraph) -> None:
    tree.files["a"] = b"1"
    repo.add("a")
    assert repo.remove("a").ok
    assert graph.staged == set()
    assert graph.marked_for_removal == {"a"}


# ---------------------------------------------------------------------------
# commit
# ---------------------------------------------------------------------------


def test_commit_inherits_parent_table(repo: Repository, tree, graph: CommitGraph, store) -> None:
    _commit(repo, tree, "one", a=b"1", b=b"1")
    _commit(repo, tree, "two", b=b"2")
    assert store.text(graph.head) == {"a": "1", "b": "2"}
    assert graph.head.parent_id == 1
    assert graph.staged == set()


def test_commit_drops_removed_files(repo: Repository, tree, graph: CommitGraph, store) -> None:
    _commit(repo, tree, "one", a=b"1", b=b"1")
    repo.remove("a")
    tree.files["b"] = b"2"
    repo.add("b")
    repo.commit("two").unwrap()
    assert store.text(graph.head) == {"b": "2"}
    assert graph.marked_for_removal == set()


def test_commit_with_nothing_staged_clears_removals(repo: Repository, tree, graph: CommitGraph) -> None:
    _commit(repo, tree, "one", a=b"1")
    repo.remove("a")
    outcome = repo.commit("nothing")
    assert outcome.error is ErrorKind.NOTHING_TO_COMMIT
    assert outcome.detail == "No changes added to the commit."
    assert graph.marked_for_removal == set()
    assert graph.head_id == 1


def test_commit_rejects_blank_message(repo: Repository, tree, graph: CommitGraph) -> None:
    tree.files["a"] = b"1"
    repo.add("a")
    assert repo.commit("   ").error is ErrorKind.EMPTY_COMMIT_MESSAGE
    assert graph.staged == {"a"}


def test_commit_fails_cleanly_when_staged_file_vanished(repo: Repository, tree, graph: CommitGraph, store) -> None:
    tree.files["a"] = b"1"
    tree.files["b"] = b"1"
    repo.add("a")
    repo.add("b")
    del tree.files["b"]
    outcome = repo.commit("broken")
    assert outcome.error is ErrorKind.FILE_NOT_FOUND
    assert graph.head_id == 0
    assert store.blobs == {}


# ---------------------------------------------------------------------------
# checkout / reset
# ---------------------------------------------------------------------------


def test_checkout_file_from_head(repo: Repository, tree) -> None:
    _commit(repo, tree, "one", a=b"1")
    tree.files["a"] = b"dirty"
    result = repo.checkout("a").unwrap()
    assert result.branch is None
    assert tree.files["a"] == b"1"


def test_checkout_file_from_older_commit(repo: Repository, tree) -> None:
    _commit(repo, tree, "one", a=b"1")
    _commit(repo, tree, "two", a=b"2")
    repo.checkout_file(1, "a").unwrap()
    assert tree.files["a"] == b"1"


def test_checkout_file_errors(repo: Repository, tree) -> None:
    _commit(repo, tree, "one", a=b"1")
    assert repo.checkout_file(9, "a").error is ErrorKind.COMMIT_NOT_FOUND
    assert repo.checkout_file(1, "zzz").error is ErrorKind.FILE_NOT_FOUND_IN_COMMIT
    assert repo.checkout("zzz").error is ErrorKind.FILE_NOT_FOUND_IN_COMMIT


def test_checkout_branch_syncs_tree(repo: Repository, tree, graph: CommitGraph) -> None:
    _commit(repo, tree, "one", a=b"1")
    repo.create_branch("dev").unwrap()
    _commit(repo, tree, "two", a=b"2", b=b"new")

    result = repo.checkout("dev").unwrap()

    assert result.branch == "dev"
    assert result.deleted == ("b",)
    assert tree.files == {"a": b"1"}
    assert graph.current_branch == "dev"
    assert graph.branches["master"] == 2


def test_checkout_current_branch_is_noop(repo: Repository, tree) -> None:
    tree.files["scratch"] = b"x"
    result = repo.checkout("master").unwrap()
    assert result.already_current
    assert tree.files == {"scratch": b"x"}


def test_reset_moves_branch_and_tree(repo: Repository, tree, graph: CommitGraph) -> None:
    _commit(repo, tree, "one", a=b"1")
    repo.create_branch("dev")
    _commit(repo, tree, "two", a=b"2", b=b"2")

    result = repo.reset(1).unwrap()

    assert result.commit_id == 1
    assert tree.files == {"a": b"1"}
    assert graph.branches == {"master": 1, "dev": 1}
    assert repo.reset(99).error is ErrorKind.COMMIT_NOT_FOUND


# ---------------------------------------------------------------------------
# queries
# ---------------------------------------------------------------------------


def test_log_and_global_log(repo: Repository, tree) -> None:
    _commit(repo, tree, "one", a=b"1")
    repo.create_branch("dev")
    _commit(repo, tree, "two", a=b"2")
    repo.checkout("dev")
    _commit(repo, tree, "three", a=b"3")

    assert [c.id for c in repo.log().unwrap()] == [3, 1, 0]
    assert [c.id for c in repo.global_log().unwrap()] == [0, 1, 2, 3]


def test_find(repo: Repository, tree) -> None:
    _commit(repo, tree, "same", a=b"1")
    _commit(repo, tree, "same", a=b"2")
    assert repo.find("same").unwrap() == [1, 2]
    missing = repo.find("other")
    assert missing.error is ErrorKind.COMMIT_NOT_FOUND
    assert missing.detail == "Found no commit with that message."


def test_branch_removal_through_facade(repo: Repository) -> None:
    repo.create_branch("dev")
    assert repo.create_branch("dev").error is ErrorKind.BRANCH_ALREADY_EXISTS
    assert repo.remove_branch("master").error is ErrorKind.CANNOT_REMOVE_CURRENT_BRANCH
    assert repo.remove_branch("dev").ok
    assert repo.status().unwrap().branches[0].name == "master"
