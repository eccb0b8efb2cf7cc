"""arbor log — commit history of the current branch, newest first.

Walks parent links from the head to the root commit.  Each entry::

    ====
    Commit 2.
    2026-10-18 14:02:11
    modify f

Timestamps are shown in local time.
"""
from __future__ import annotations

import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session
from arbor.vcs.graph import Commit

app = typer.Typer()

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_log_entry(commit: Commit) -> str:
    """Render one commit in ``arbor log`` format; echoing it leaves a blank separator line."""
    stamp = commit.timestamp.astimezone().strftime(_DATE_FORMAT)
    return f"====\nCommit {commit.id}.\n{stamp}\n{commit.message}\n"


async def _log_async(*, root: pathlib.Path, session: AsyncSession) -> list[Commit]:
    async with open_repository(root, session) as repo:
        commits = repo.log().unwrap()
    for commit in commits:
        typer.echo(format_log_entry(commit))
    return commits


@app.callback(invoke_without_command=True)
def log(ctx: typer.Context) -> None:
    """Show the history of the current branch."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _log_async(root=root, session=session)

    run_command("log", _run)
