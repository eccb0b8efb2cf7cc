"""Error kinds, structured outcomes, and fatal exception types for the Arbor core.

Core operations never raise for a rejected request.  They return an
:class:`Outcome` carrying either a value or an :class:`ErrorKind`, and
validation always happens before any mutation so a failed outcome means the
:class:`~arbor.vcs.graph.CommitGraph` is untouched.

The only exceptions the core lets escape are collaborator failures
(:class:`CollaboratorError`): a content store or working tree that cannot
read or write is fatal for the enclosing command.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    """Every locally detected failure a core operation can report."""

    BRANCH_NOT_FOUND = "branch_not_found"
    BRANCH_ALREADY_EXISTS = "branch_already_exists"
    COMMIT_NOT_FOUND = "commit_not_found"
    FILE_NOT_FOUND = "file_not_found"
    FILE_NOT_FOUND_IN_COMMIT = "file_not_found_in_commit"
    FILE_UNCHANGED = "file_unchanged"
    NO_REASON_TO_REMOVE = "no_reason_to_remove"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    EMPTY_COMMIT_MESSAGE = "empty_commit_message"
    CANNOT_REMOVE_CURRENT_BRANCH = "cannot_remove_current_branch"
    CANNOT_MERGE_SELF = "cannot_merge_self"
    CANNOT_REBASE_ONTO_SELF = "cannot_rebase_onto_self"
    ALREADY_UP_TO_DATE = "already_up_to_date"
    NO_COMMON_ANCESTOR = "no_common_ancestor"
    INVALID_PATH = "invalid_path"
    IO_FAILURE = "io_failure"


# Default human-readable text for each kind.  Callers may pass a more
# specific ``detail`` when building an Outcome.
MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.BRANCH_NOT_FOUND: "A branch with that name does not exist.",
    ErrorKind.BRANCH_ALREADY_EXISTS: "A branch with that name already exists.",
    ErrorKind.COMMIT_NOT_FOUND: "No commit with that id exists.",
    ErrorKind.FILE_NOT_FOUND: "File does not exist.",
    ErrorKind.FILE_NOT_FOUND_IN_COMMIT: "File does not exist in that commit.",
    ErrorKind.FILE_UNCHANGED: "File has not been modified since the last commit.",
    ErrorKind.NO_REASON_TO_REMOVE: "No reason to remove the file.",
    ErrorKind.NOTHING_TO_COMMIT: "No changes added to the commit.",
    ErrorKind.EMPTY_COMMIT_MESSAGE: "Please enter a commit message.",
    ErrorKind.CANNOT_REMOVE_CURRENT_BRANCH: "Cannot remove the current branch.",
    ErrorKind.CANNOT_MERGE_SELF: "Cannot merge a branch with itself.",
    ErrorKind.CANNOT_REBASE_ONTO_SELF: "Cannot rebase a branch onto itself.",
    ErrorKind.ALREADY_UP_TO_DATE: "Already up-to-date.",
    ErrorKind.NO_COMMON_ANCESTOR: "The branches share no common ancestor.",
    ErrorKind.INVALID_PATH: "Path is not a file in the working tree.",
    ErrorKind.IO_FAILURE: "A storage operation failed.",
}


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Success/failure result of a core operation.

    Attributes:
        value:  Payload on success (``None`` on failure).
        error:  The failure kind, or ``None`` on success.
        detail: Human-readable explanation of the failure (empty on success).
    """

    value: T | None = None
    error: ErrorKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str | None = None) -> Outcome[T]:
        return cls(error=error, detail=detail or MESSAGES[error])

    def unwrap(self) -> T:
        """Return the payload, raising :class:`ArborError` on a failed outcome."""
        if self.error is not None:
            raise ArborError(self.detail, kind=self.error)
        return self.value  # type: ignore[return-value]


class ArborError(Exception):
    """Base exception for Arbor errors that must leave the core."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.IO_FAILURE) -> None:
        super().__init__(message)
        self.kind = kind


class CollaboratorError(ArborError):
    """Raised by a ContentStore or WorkingTree that cannot complete an I/O request.

    Never caught inside the core; the enclosing command aborts.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.IO_FAILURE)


class InvalidPathError(ArborError):
    """Raised by a WorkingTree for a path outside the tree or inside ``.arbor/``.

    A user mistake rather than an I/O failure, so the CLI exits 1.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.INVALID_PATH)
