"""arbor merge <branch> — bring another branch's changes into the working tree.

Algorithm
---------
1. Reject merging the current branch into itself, then unknown branches.
2. Find the split point (nearest common ancestor) of the two heads.
3. Classify every path of each head as modified or not since the split.
4. For each path of the given branch:
   - modified there only → write the given version over the working file;
   - modified on both sides → write the given version to ``<path>.conflicted``
     and leave ``<path>`` as is;
   - otherwise → nothing.

No commit is created and no branch moves: the result is a working-tree
change the user reviews and commits.  Running the same merge twice rewrites
the same files.
"""
from __future__ import annotations

import logging
import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import confirm_dangerous, fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session
from arbor.config import settings
from arbor.vcs.merge_engine import MergeResult

logger = logging.getLogger(__name__)


async def _merge_async(
    *, branch: str, root: pathlib.Path, session: AsyncSession
) -> MergeResult:
    """Run the merge and report what was written.

    Raises :class:`typer.Exit` for rejected merges so the Typer callback
    surfaces a clean message.
    """
    async with open_repository(root, session) as repo:
        outcome = repo.merge(branch)
        if outcome.value is None:
            fail(outcome)
        result = outcome.value

    if not result.actions:
        typer.echo("Already up-to-date.")
        return result
    for path in result.taken:
        typer.echo(f"\tupdated:         {path}")
    for path in result.conflicts:
        typer.echo(f"\tboth modified:   {path}")
    if result.conflicts:
        typer.echo(
            f"⚠️ {len(result.conflicts)} conflict(s); their versions were written "
            f"next to yours with a {settings.conflict_suffix} suffix."
        )
    logger.info(
        "✅ arbor merge %r: %d updated, %d conflicted",
        branch,
        len(result.taken),
        len(result.conflicts),
    )
    return result


def run_merge(*, branch: str, yes: bool) -> None:
    """Synchronous entry point registered on the root Typer app."""
    root = require_repo()
    confirm_dangerous(yes)

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _merge_async(branch=branch, root=root, session=session)

    run_command("merge", _run)
