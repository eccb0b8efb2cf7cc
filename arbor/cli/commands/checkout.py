"""arbor checkout — restore files or switch branches.

Forms
-----
``arbor checkout <branch>``
    Switch to *branch*: every file of its head commit is written into the
    working tree and files tracked only by the previous head are deleted.
``arbor checkout <file>``
    When no branch has that name, restore *file* from the head commit.
``arbor checkout <commit-id> <file>``
    Restore *file* as it was in commit *commit-id*.

All forms overwrite working files, so they ask for confirmation unless
``--yes`` is given.
"""
from __future__ import annotations

import logging
import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import confirm_dangerous, fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session
from arbor.cli.errors import ExitCode
from arbor.vcs.repository import CheckoutResult

logger = logging.getLogger(__name__)


def parse_commit_id(text: str) -> int:
    """Parse a user-supplied commit id, exiting 1 when it is not an integer."""
    try:
        return int(text)
    except ValueError:
        typer.echo(f"❌ '{text}' is not a commit id.")
        raise typer.Exit(code=ExitCode.USER_ERROR)


async def _checkout_async(
    *,
    target: str,
    path: str | None,
    root: pathlib.Path,
    session: AsyncSession,
) -> CheckoutResult:
    commit_id = parse_commit_id(target) if path is not None else None
    async with open_repository(root, session) as repo:
        if commit_id is not None and path is not None:
            outcome = repo.checkout_file(commit_id, path)
        else:
            outcome = repo.checkout(target)
        if outcome.value is None:
            fail(outcome)
        result = outcome.value

    if result.already_current:
        typer.echo("No need to checkout the current branch.")
    elif result.branch is not None:
        typer.echo(f"Switched to branch '{result.branch}'.")
    else:
        typer.echo(f"Restored '{result.written[0]}' from commit {result.commit_id}.")
    return result


def run_checkout(*, target: str, path: str | None, yes: bool) -> None:
    """Synchronous entry point registered on the root Typer app."""
    root = require_repo()
    confirm_dangerous(yes)

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _checkout_async(target=target, path=path, root=root, session=session)

    run_command("checkout", _run)
