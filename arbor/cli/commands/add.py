"""arbor add <file> — stage a file for the next commit.

Refuses files that do not exist and files whose bytes match the version in
the head commit.  Staging a file also cancels a pending ``arbor rm`` of it.
"""
from __future__ import annotations

import logging
import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session

logger = logging.getLogger(__name__)

app = typer.Typer()


async def _add_async(*, path: str, root: pathlib.Path, session: AsyncSession) -> str:
    async with open_repository(root, session) as repo:
        outcome = repo.add(path)
        if not outcome.ok:
            fail(outcome)
        return path


@app.callback(invoke_without_command=True)
def add(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Repository-relative path of the file to stage."),
) -> None:
    """Stage a file for the next commit."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _add_async(path=path, root=root, session=session)

    run_command("add", _run)
