"""arbor branch / arbor rm-branch — create and delete branch references.

``arbor branch <name>`` binds *name* to the current head without switching
to it.  ``arbor rm-branch <name>`` deletes the reference only; the commits
stay in the repository and remain visible in ``arbor global-log``.
"""
from __future__ import annotations

import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session

app = typer.Typer()
remove_app = typer.Typer()


async def _branch_async(*, name: str, root: pathlib.Path, session: AsyncSession) -> int:
    async with open_repository(root, session) as repo:
        outcome = repo.create_branch(name)
        if outcome.value is None:
            fail(outcome)
        return outcome.value


async def _rm_branch_async(*, name: str, root: pathlib.Path, session: AsyncSession) -> int:
    async with open_repository(root, session) as repo:
        outcome = repo.remove_branch(name)
        if outcome.value is None:
            fail(outcome)
        return outcome.value


@app.callback(invoke_without_command=True)
def branch(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the branch to create at HEAD."),
) -> None:
    """Create a branch at the current head."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _branch_async(name=name, root=root, session=session)

    run_command("branch", _run)


@remove_app.callback(invoke_without_command=True)
def rm_branch(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the branch to delete."),
) -> None:
    """Delete a branch reference."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _rm_branch_async(name=name, root=root, session=session)

    run_command("rm-branch", _run)
