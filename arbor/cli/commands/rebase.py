"""arbor rebase <branch> — replay this branch's own commits onto another branch.

Algorithm
---------
1. ``<branch>`` must exist and differ from the current branch.
2. ``<branch>``'s head already in this branch's history → "Already up-to-date."
3. This branch's head in ``<branch>``'s history → fast-forward the pointer.
4. Otherwise every commit since the split point is copied onto the tip of
   ``<branch>`` with new ids (oldest copy gets the smallest id).  Files the
   other branch changed since the split are layered into each copy, except
   files this branch changed too, where this branch's version wins.
5. The new head's files are written into the working tree.

``--interactive`` / ``-i``
---------------------------
Before each copy is made (newest commit first), shows the commit and asks::

    Would you like to (c)ontinue, (s)kip this commit, or change this commit's (m)essage?

The first commit offered and a commit sitting directly on the split point
cannot be skipped; choosing ``s`` for them asks again.
"""
from __future__ import annotations

import logging
import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import confirm_dangerous, fail, open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.commands.log import format_log_entry
from arbor.cli.db import open_session
from arbor.vcs.collaborators import DecisionSource
from arbor.vcs.errors import ErrorKind
from arbor.vcs.graph import Commit
from arbor.vcs.rebase_engine import Decision, RebaseKind, RebaseResult

logger = logging.getLogger(__name__)

_PROMPT = "Would you like to (c)ontinue, (s)kip this commit, or change this commit's (m)essage?"


class PromptDecisions:
    """DecisionSource that asks on the terminal for each replay candidate."""

    def next(self, candidate: Commit) -> Decision:
        typer.echo("Currently replaying:")
        typer.echo(format_log_entry(candidate))
        while True:
            answer = typer.prompt(_PROMPT).strip().lower()
            if answer == "c":
                return Decision.proceed()
            if answer == "s":
                return Decision.skip()
            if answer == "m":
                message = ""
                while not message.strip():
                    message = typer.prompt("Please enter a new message for this commit.")
                return Decision.reword(message)


async def _rebase_async(
    *,
    branch: str,
    root: pathlib.Path,
    session: AsyncSession,
    decisions: DecisionSource | None = None,
) -> RebaseResult | None:
    """Run the rebase.  Returns ``None`` when already up-to-date."""
    async with open_repository(root, session) as repo:
        outcome = repo.rebase(branch, decisions)
        if outcome.error is ErrorKind.ALREADY_UP_TO_DATE:
            typer.echo(outcome.detail)
            return None
        if outcome.value is None:
            fail(outcome)
        result = outcome.value

    if result.kind is RebaseKind.FAST_FORWARD:
        typer.echo(f"✅ Fast-forward: {result.branch} → {result.onto_commit_id}")
    else:
        typer.echo(
            f"✅ Rebased {result.branch} onto {result.onto}: "
            f"{len(result.replayed)} commit(s) replayed"
            + (f", {len(result.skipped)} skipped" if result.skipped else "")
        )
        for pair in result.replayed:
            typer.echo(f"\t{pair.original_id} → {pair.new_id}")
    return result


def run_rebase(*, branch: str, interactive: bool, yes: bool) -> None:
    """Synchronous entry point registered on the root Typer app."""
    root = require_repo()
    confirm_dangerous(yes)
    decisions = PromptDecisions() if interactive else None

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _rebase_async(branch=branch, root=root, session=session, decisions=decisions)

    run_command("rebase", _run)
