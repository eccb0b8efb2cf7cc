"""arbor reset <commit-id> — move the current branch to any commit.

Writes every file of the target commit into the working tree, deletes files
tracked by the old head but not by the target, then points the current
branch at the target.  Other branches are untouched.
"""
from __future__ import annotations

import logging
import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import confirm_dangerous, fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.commands.checkout import parse_commit_id
from arbor.cli.db import open_session
from arbor.vcs.repository import CheckoutResult

logger = logging.getLogger(__name__)


async def _reset_async(
    *, commit_id: int, root: pathlib.Path, session: AsyncSession
) -> CheckoutResult:
    async with open_repository(root, session) as repo:
        outcome = repo.reset(commit_id)
        if outcome.value is None:
            fail(outcome)
        result = outcome.value
    typer.echo(f"HEAD is now at {result.commit_id}.")
    return result


def run_reset(*, commit_id: str, yes: bool) -> None:
    """Synchronous entry point registered on the root Typer app."""
    root = require_repo()
    target = parse_commit_id(commit_id)
    confirm_dangerous(yes)

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _reset_async(commit_id=target, root=root, session=session)

    run_command("reset", _run)
