"""Exit-code contract for the Arbor CLI."""
from __future__ import annotations

import enum

from arbor.vcs.errors import ErrorKind


class ExitCode(enum.IntEnum):
    """Standardised CLI exit codes.

    0 — success
    1 — user error (bad arguments, rejected operation)
    2 — repo-not-found / config invalid
    3 — storage / internal error
    """

    SUCCESS = 0
    USER_ERROR = 1
    REPO_NOT_FOUND = 2
    INTERNAL_ERROR = 3


def exit_code_for(kind: ErrorKind) -> ExitCode:
    """Map a failed outcome to the exit code the shell reports."""
    if kind is ErrorKind.ALREADY_UP_TO_DATE:
        return ExitCode.SUCCESS
    if kind is ErrorKind.IO_FAILURE:
        return ExitCode.INTERNAL_ERROR
    return ExitCode.USER_ERROR
