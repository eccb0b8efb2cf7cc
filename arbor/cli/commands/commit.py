"""arbor commit <message> — record the staged files as a new commit.

Algorithm
---------
1. Reject a blank message.
2. With nothing staged, print "No changes added to the commit.", clear any
   pending removals, and exit 0 without creating a commit.
3. Start from the head commit's file table, drop every staged and every
   removed path, then store each staged file's current bytes in
   ``.arbor/objects/`` and record the new handles.
4. Assign the next commit id, link the commit under the head, advance the
   current branch and clear both staging sets.
"""
from __future__ import annotations

import logging
import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session
from arbor.vcs.errors import ErrorKind
from arbor.vcs.graph import Commit

logger = logging.getLogger(__name__)

app = typer.Typer()


async def _commit_async(
    *, message: str, root: pathlib.Path, session: AsyncSession
) -> Commit | None:
    """Commit staged files.  Returns ``None`` when there was nothing to commit."""
    async with open_repository(root, session) as repo:
        outcome = repo.commit(message)
        if outcome.error is ErrorKind.NOTHING_TO_COMMIT:
            typer.echo(outcome.detail)
            return None
        if outcome.value is None:
            fail(outcome)
        commit = outcome.value
        typer.echo(f"[{repo.graph.current_branch} {commit.id}] {commit.message}")
        return commit


@app.callback(invoke_without_command=True)
def commit(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Commit message."),
) -> None:
    """Record staged files as a new commit."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _commit_async(message=message, root=root, session=session)

    run_command("commit", _run)
