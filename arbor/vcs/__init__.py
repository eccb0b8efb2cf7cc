"""Arbor core: commit graph, ancestry, merge and rebase engines.

Pure in-memory logic.  File bytes, the working tree and persistence are
reached only through the protocols in :mod:`arbor.vcs.collaborators`.
"""
from __future__ import annotations

from arbor.vcs.ancestry import AncestryResolver
from arbor.vcs.errors import (
    ArborError,
    CollaboratorError,
    ErrorKind,
    InvalidPathError,
    Outcome,
)
from arbor.vcs.graph import Commit, CommitGraph, StatusReport
from arbor.vcs.merge_engine import FileAction, FileActionKind, MergeEngine, MergeResult
from arbor.vcs.rebase_engine import (
    Decision,
    DecisionKind,
    RebaseEngine,
    RebaseKind,
    RebaseResult,
    ScriptedDecisions,
)
from arbor.vcs.repository import CheckoutResult, Repository

__all__ = [
    "AncestryResolver",
    "ArborError",
    "CheckoutResult",
    "CollaboratorError",
    "Commit",
    "CommitGraph",
    "Decision",
    "DecisionKind",
    "ErrorKind",
    "FileAction",
    "FileActionKind",
    "InvalidPathError",
    "MergeEngine",
    "MergeResult",
    "Outcome",
    "RebaseEngine",
    "RebaseKind",
    "RebaseResult",
    "Repository",
    "ScriptedDecisions",
    "StatusReport",
]
