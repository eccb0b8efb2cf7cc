"""arbor find <message> — print the id of every commit with exactly that message."""
from __future__ import annotations

import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session

app = typer.Typer()


async def _find_async(*, message: str, root: pathlib.Path, session: AsyncSession) -> list[int]:
    async with open_repository(root, session) as repo:
        outcome = repo.find(message)
    if outcome.value is None:
        fail(outcome)
    for commit_id in outcome.value:
        typer.echo(str(commit_id))
    return outcome.value


@app.callback(invoke_without_command=True)
def find(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Exact commit message to search for."),
) -> None:
    """Find commits by message."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _find_async(message=message, root=root, session=session)

    run_command("find", _run)
