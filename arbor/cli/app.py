"""Arbor CLI — Typer application root.

Entry point for the ``arbor`` console script.  Read-only and staging
commands are Typer sub-applications; commands that may overwrite working
files (checkout, reset, merge, rebase) are plain ``@cli.command`` entries so
options such as ``--yes`` are recognised after the positional arguments.
"""
from __future__ import annotations

import logging
from typing import Optional

import typer

from arbor.cli.commands import (
    add,
    branch,
    commit,
    find,
    global_log,
    init,
    log,
    rm,
    status,
)
from arbor.cli.commands.checkout import run_checkout as _checkout_logic
from arbor.cli.commands.merge import run_merge as _merge_logic
from arbor.cli.commands.rebase import run_rebase as _rebase_logic
from arbor.cli.commands.reset import run_reset as _reset_logic
from arbor.config import settings

cli = typer.Typer(
    name="arbor",
    help="Arbor — local version control with branches, merge and rebase.",
    no_args_is_help=True,
)


@cli.callback()
def _root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.resolved_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


cli.add_typer(init.app, name="init", help="Create an empty repository here.")
cli.add_typer(add.app, name="add", help="Stage a file for the next commit.")
cli.add_typer(rm.app, name="rm", help="Unstage a file or mark it for removal.")
cli.add_typer(commit.app, name="commit", help="Record staged changes as a new commit.")
cli.add_typer(log.app, name="log", help="Show the current branch's history.")
cli.add_typer(global_log.app, name="global-log", help="Show every commit ever made.")
cli.add_typer(find.app, name="find", help="Print ids of commits with a given message.")
cli.add_typer(status.app, name="status", help="Show branches and staged files.")
cli.add_typer(branch.app, name="branch", help="Create a branch at the current head.")
cli.add_typer(branch.remove_app, name="rm-branch", help="Delete a branch reference.")


@cli.command("checkout", help="Switch branches or restore a file from a commit.")
def _checkout_cmd(
    target: str = typer.Argument(..., help="Branch name, file name, or commit id."),
    path: Optional[str] = typer.Argument(None, help="File to restore from commit TARGET."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    _checkout_logic(target=target, path=path, yes=yes)


@cli.command("reset", help="Move the current branch to a commit.")
def _reset_cmd(
    commit_id: str = typer.Argument(..., help="Id of the commit to reset to."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    _reset_logic(commit_id=commit_id, yes=yes)


@cli.command("merge", help="Merge a branch's changes into the working tree.")
def _merge_cmd(
    branch_name: str = typer.Argument(..., metavar="BRANCH", help="Branch to merge in."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    _merge_logic(branch=branch_name, yes=yes)


@cli.command("rebase", help="Replay this branch's commits onto another branch.")
def _rebase_cmd(
    branch_name: str = typer.Argument(..., metavar="BRANCH", help="Branch to rebase onto."),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Choose continue / skip / reword per commit."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    _rebase_logic(branch=branch_name, interactive=interactive, yes=yes)


if __name__ == "__main__":
    cli()
