"""arbor rm <file> — mark a file for removal from the next commit.

The working file is left on disk; it simply stops being tracked once the
next commit is made.  A staged file is unstaged.
"""
from __future__ import annotations

import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session

app = typer.Typer()


async def _rm_async(*, path: str, root: pathlib.Path, session: AsyncSession) -> str:
    async with open_repository(root, session) as repo:
        outcome = repo.remove(path)
        if not outcome.ok:
            fail(outcome)
        return path


@app.callback(invoke_without_command=True)
def rm(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Repository-relative path to stop tracking."),
) -> None:
    """Mark a file for removal."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _rm_async(path=path, root=root, session=session)

    run_command("rm", _run)
