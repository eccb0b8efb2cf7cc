"""arbor global-log — every commit ever made, in id order, across all branches.

Includes commits no branch points to any more (removed branches, commits
superseded by a rebase).
"""
from __future__ import annotations

import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.commands.log import format_log_entry
from arbor.cli.db import open_session
from arbor.vcs.graph import Commit

app = typer.Typer()


async def _global_log_async(*, root: pathlib.Path, session: AsyncSession) -> list[Commit]:
    async with open_repository(root, session) as repo:
        commits = repo.global_log().unwrap()
    for commit in commits:
        typer.echo(format_log_entry(commit))
    return commits


@app.callback(invoke_without_command=True)
def global_log(ctx: typer.Context) -> None:
    """Show every commit in the repository."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _global_log_async(root=root, session=session)

    run_command("global-log", _run)
